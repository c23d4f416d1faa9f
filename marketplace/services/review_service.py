from typing import Dict, Any, Optional

from sqlalchemy.orm import Session

from marketplace.data.models.review import ReviewModel
from marketplace.data.unit_of_work import unit_of_work
from marketplace.domain.errors import Conflict, Forbidden, NotFound
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.review_repo import ReviewRepo
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class ReviewService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ReviewRepo(db)
        self.products = ProductRepo(db)

    def list_product_reviews(self, product_id: int) -> Dict[str, Any]:
        reviews = self.repo.list_product_reviews(product_id)
        average = sum(r.rating for r in reviews) / len(reviews) if reviews else 0

        return {
            "reviews": reviews,
            "total_reviews": len(reviews),
            "average_rating": round(average, 1),
        }

    def add_review(self, user_id: int, product_id: int, rating: int, comment: Optional[str] = None) -> ReviewModel:
        with unit_of_work(self.db):
            if not self.products.get_product(product_id):
                raise NotFound("Product not found")
            if self.repo.get_user_review(user_id, product_id):
                raise Conflict("You have already reviewed this product")

            review = self.repo.add_review(
                ReviewModel(user_id=user_id, product_id=product_id, rating=rating, comment=comment)
            )

        logger.info(f"User {user_id} reviewed product {product_id}: {rating}/5")
        return self.repo.get_review(review.id)

    def delete_review(self, user_id: int, review_id: int) -> None:
        with unit_of_work(self.db):
            review = self.repo.get_review(review_id)
            if not review:
                raise NotFound("Review not found")
            if review.user_id != user_id:
                raise Forbidden("You are not authorized to delete this review")
            self.repo.delete_review(review)

    def update_review(self, user_id: int, review_id: int, rating: Optional[int] = None, comment: Optional[str] = None) -> ReviewModel:
        with unit_of_work(self.db):
            review = self.repo.get_review(review_id)
            if not review:
                raise NotFound("Review not found")
            if review.user_id != user_id:
                raise Forbidden("You are not authorized to update this review")

            if rating is not None:
                review.rating = rating
            if comment is not None:
                review.comment = comment or None

        return self.repo.get_review(review_id)
