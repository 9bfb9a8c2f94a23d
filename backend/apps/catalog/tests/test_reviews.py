# apps/catalog/tests/test_reviews.py
"""Tests for product reviews"""
import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from apps.catalog.models import Review
from apps.core.testing import create_product, create_user


@pytest.mark.django_db
class TestProductReviews:
    def setup_method(self):
        self.client = APIClient()
        self.product = create_product()
        self.user = create_user(name="Reviewer")
        self.url = reverse("catalog:product-reviews", args=[self.product.id])

    def test_create_review(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.post(
            self.url,
            {"rating": 4, "title": "Nice", "comment": "<b>Really</b> solid build quality"},
            format="json",
        )

        assert response.status_code == 201
        assert response.data["user_name"] == "Reviewer"
        review = Review.objects.get(product=self.product, user=self.user)
        assert review.comment == "Really solid build quality"
        assert review.is_approved is True

    def test_review_requires_auth(self):
        response = self.client.post(self.url, {"rating": 4, "comment": "Long enough text"}, format="json")

        assert response.status_code == 401

    def test_comment_too_short(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.post(self.url, {"rating": 4, "comment": "meh"}, format="json")

        assert response.status_code == 400

    def test_rating_out_of_range(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.post(self.url, {"rating": 6, "comment": "Long enough text"}, format="json")

        assert response.status_code == 400

    def test_one_review_per_user(self):
        Review.objects.create(product=self.product, user=self.user, rating=3, comment="First opinion")
        self.client.force_authenticate(user=self.user)

        response = self.client.post(self.url, {"rating": 5, "comment": "Second opinion"}, format="json")

        assert response.status_code == 409

    def test_list_only_approved_with_statistics(self):
        Review.objects.create(product=self.product, user=create_user(), rating=5, comment="Great great")
        Review.objects.create(
            product=self.product, user=create_user(), rating=1, comment="Hidden one", is_approved=False
        )

        response = self.client.get(self.url)

        assert response.status_code == 200
        assert len(response.data["reviews"]) == 1
        assert response.data["statistics"]["total_reviews"] == 1
        assert response.data["statistics"]["average_rating"] == 5.0

    def test_new_review_refreshes_statistics(self):
        self.client.get(self.url)
        self.client.force_authenticate(user=self.user)
        self.client.post(self.url, {"rating": 2, "comment": "Changed my mind"}, format="json")

        response = self.client.get(self.url)

        assert response.data["statistics"]["total_reviews"] == 1

    def test_filter_and_sort(self):
        Review.objects.create(product=self.product, user=create_user(), rating=5, comment="Top marks here", helpful_count=1)
        Review.objects.create(product=self.product, user=create_user(), rating=3, comment="Just average", helpful_count=7)

        by_rating = self.client.get(self.url, {"rating": 3})
        by_helpful = self.client.get(self.url, {"sort_by": "helpful"})

        assert [r["rating"] for r in by_rating.data["reviews"]] == [3]
        assert [r["helpful_count"] for r in by_helpful.data["reviews"]] == [7, 1]

    def test_mark_helpful(self):
        review = Review.objects.create(product=self.product, user=create_user(), rating=4, comment="Useful one")

        response = self.client.post(reverse("catalog:review-helpful", args=[review.id]))

        assert response.status_code == 200
        assert response.data["helpful_count"] == 1
