from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace.data.models.review import ReviewModel


class ReviewRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_review(self, review_id: int) -> ReviewModel | None:
        return self.db.get(ReviewModel, review_id)

    def get_user_review(self, user_id: int, product_id: int) -> ReviewModel | None:
        return self.db.execute(
            select(ReviewModel).where(
                ReviewModel.user_id == user_id,
                ReviewModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def list_product_reviews(self, product_id: int):
        return self.db.execute(
            select(ReviewModel)
            .where(ReviewModel.product_id == product_id)
            .order_by(ReviewModel.created_at.desc(), ReviewModel.id.desc())
        ).scalars().all()

    def add_review(self, review: ReviewModel) -> ReviewModel:
        self.db.add(review)
        self.db.flush()
        return review

    def delete_review(self, review: ReviewModel) -> None:
        self.db.delete(review)
        self.db.flush()
