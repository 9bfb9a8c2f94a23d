# apps/recommendations/tests/test_recommendations.py
"""Tests for view tracking and recommendations"""
import uuid
from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from apps.catalog.models import Product
from apps.core.testing import create_category, create_product, create_user
from apps.recommendations import services
from apps.recommendations.models import ProductView


@pytest.mark.django_db
class TestTrackView:
    def setup_method(self):
        self.client = APIClient()
        self.product = create_product()

    def test_anonymous_view_with_session_header(self):
        response = self.client.post(
            reverse("recommendations:track-view", args=[self.product.id]), HTTP_X_SESSION_ID="s1"
        )

        assert response.status_code == 201
        assert response.data["success"] is True
        view = ProductView.objects.get()
        assert str(view.id) == response.data["view_id"]
        assert view.session_id == "s1"
        assert view.user is None

    def test_session_id_from_body(self):
        response = self.client.post(
            reverse("recommendations:track-view", args=[self.product.id]),
            {"session_id": "body-session"},
            format="json",
        )

        assert response.status_code == 201
        assert ProductView.objects.get().session_id == "body-session"

    def test_authenticated_view_records_user(self):
        user = create_user()
        self.client.force_authenticate(user=user)

        self.client.post(reverse("recommendations:track-view", args=[self.product.id]))

        view = ProductView.objects.get()
        assert view.user == user
        assert view.session_id == ""

    def test_repeat_view_refreshes_existing_row(self):
        url = reverse("recommendations:track-view", args=[self.product.id])
        first = self.client.post(url, HTTP_X_SESSION_ID="s1")
        second = self.client.post(url, HTTP_X_SESSION_ID="s1")

        assert first.data["view_id"] == second.data["view_id"]
        assert ProductView.objects.count() == 1

    def test_view_after_window_creates_new_row(self):
        url = reverse("recommendations:track-view", args=[self.product.id])
        self.client.post(url, HTTP_X_SESSION_ID="s1")
        ProductView.objects.update(viewed_at=timezone.now() - timedelta(minutes=31))

        self.client.post(url, HTTP_X_SESSION_ID="s1")

        assert ProductView.objects.count() == 2

    def test_different_sessions_are_separate(self):
        url = reverse("recommendations:track-view", args=[self.product.id])
        self.client.post(url, HTTP_X_SESSION_ID="s1")
        self.client.post(url, HTTP_X_SESSION_ID="s2")

        assert ProductView.objects.count() == 2

    def test_unknown_product(self):
        response = self.client.post(
            reverse("recommendations:track-view", args=[uuid.uuid4()]), HTTP_X_SESSION_ID="s1"
        )

        assert response.status_code == 404
        assert response.data["error"]["code"] == "NOT_FOUND"


@pytest.mark.django_db
class TestRecommendationServices:
    def setup_method(self):
        self.category = create_category()
        self.other_category = create_category()
        self.p1 = create_product(category=self.category)
        self.p2 = create_product(category=self.other_category)
        self.p3 = create_product(category=self.other_category)

    def test_unknown_viewer_gets_nothing_collaborative(self):
        assert services.get_collaborative_recommendations(None, None) == []

    def test_collaborative_finds_co_viewed_products(self):
        other = create_user()
        services.track_product_view(self.p1.id, other)
        services.track_product_view(self.p2.id, other)
        services.track_product_view(self.p1.id, None, "s1")

        result = services.get_collaborative_recommendations(None, "s1")

        assert result == [self.p2.id]

    def test_collaborative_respects_exclude(self):
        other = create_user()
        services.track_product_view(self.p1.id, other)
        services.track_product_view(self.p2.id, other)
        services.track_product_view(self.p1.id, None, "s1")

        assert services.get_collaborative_recommendations(None, "s1", exclude_ids=[self.p2.id]) == []

    def test_content_based_uses_viewed_categories(self):
        services.track_product_view(self.p2.id, None, "s1")

        result = services.get_content_based_recommendations(None, "s1")

        assert set(result) == {self.p2.id, self.p3.id}

    def test_content_based_ranks_by_popularity(self):
        for session in ("a", "b", "c"):
            services.track_product_view(self.p3.id, None, session)

        result = services.get_content_based_recommendations(category_id=self.other_category.id)

        assert result[0] == self.p3.id

    def test_content_based_skips_inactive_products(self):
        create_product(category=self.category, status=Product.STATUS_INACTIVE)

        result = services.get_content_based_recommendations(category_id=self.category.id)

        assert result == [self.p1.id]

    def test_merged_list_has_no_duplicates(self):
        other = create_user()
        services.track_product_view(self.p1.id, other)
        services.track_product_view(self.p2.id, other)
        services.track_product_view(self.p1.id, None, "s1")

        result = services.get_recommendations(None, "s1", limit=10)

        assert result[0] == self.p2.id
        assert len(result) == len(set(result))

    def test_merged_list_respects_limit(self):
        services.track_product_view(self.p2.id, None, "s1")

        assert len(services.get_recommendations(None, "s1", limit=1)) == 1


@pytest.mark.django_db
class TestRecommendationsView:
    def setup_method(self):
        self.client = APIClient()
        self.category = create_category()
        self.products = [create_product(category=self.category) for _ in range(3)]

    def test_recent_views(self):
        old, new = self.products[0], self.products[1]
        services.track_product_view(old.id, None, "s1")
        ProductView.objects.update(viewed_at=timezone.now() - timedelta(hours=1))
        services.track_product_view(new.id, None, "s1")

        response = self.client.get(
            reverse("recommendations:recommendations"), {"type": "recent"}, HTTP_X_SESSION_ID="s1"
        )

        assert response.status_code == 200
        assert response.data["type"] == "recent"
        assert [p["id"] for p in response.data["products"]] == [str(new.id), str(old.id)]

    def test_general_for_category(self):
        response = self.client.get(
            reverse("recommendations:recommendations"), {"category_id": str(self.category.id)}
        )

        assert response.status_code == 200
        assert response.data["type"] == "general"
        assert {p["id"] for p in response.data["products"]} == {str(p.id) for p in self.products}

    def test_general_with_exclude(self):
        excluded = self.products[0]

        response = self.client.get(
            reverse("recommendations:recommendations"),
            {"category_id": str(self.category.id), "exclude": str(excluded.id)},
        )

        assert str(excluded.id) not in {p["id"] for p in response.data["products"]}

    def test_unknown_viewer_gets_empty_list(self):
        response = self.client.get(reverse("recommendations:recommendations"))

        assert response.status_code == 200
        assert response.data["products"] == []

    def test_invalid_type(self):
        response = self.client.get(reverse("recommendations:recommendations"), {"type": "trending"})

        assert response.status_code == 400
        assert response.data["error"]["code"] == "VALIDATION_ERROR"

    def test_invalid_exclude_id(self):
        response = self.client.get(reverse("recommendations:recommendations"), {"exclude": "nope"})

        assert response.status_code == 400
