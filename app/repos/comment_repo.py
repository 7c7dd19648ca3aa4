# app/repos/comment_repo.py
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.data.models.comment import CommentModel


class CommentRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_comment(self, comment_id: int) -> CommentModel | None:
        return self.db.get(CommentModel, comment_id)

    def list_for_product(self, product_id: int) -> List[CommentModel]:
        return list(
            self.db.execute(
                select(CommentModel)
                .where(CommentModel.product_id == product_id)
                .order_by(CommentModel.created_at.desc(), CommentModel.id.desc())
            ).scalars().all()
        )

    def save(self, comment: CommentModel) -> CommentModel:
        self.db.add(comment)
        self.db.commit()
        self.db.refresh(comment)
        return comment

    def delete(self, comment: CommentModel):
        self.db.delete(comment)
        self.db.commit()
