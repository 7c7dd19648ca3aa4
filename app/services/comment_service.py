# app/services/comment_service.py
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.data.models.comment import CommentModel
from app.domain.errors import CommentNotFoundError, ProductNotFoundError, UnauthorizedError
from app.repos.comment_repo import CommentRepo
from app.repos.product_repo import ProductRepo


class CommentService:
    def __init__(self, db: Session):
        self.repo = CommentRepo(db)
        self.products = ProductRepo(db)

    @staticmethod
    def _to_dict(comment: CommentModel) -> Dict[str, Any]:
        return {
            "id": comment.id,
            "product_id": comment.product_id,
            "user_id": comment.user_id,
            "username": comment.user.username,
            "text": comment.text,
            "created_at": comment.created_at,
            "updated_at": comment.updated_at,
        }

    def create(self, product_id: int, user_id: int, text: str) -> Dict[str, Any]:
        if not self.products.get_product(product_id):
            raise ProductNotFoundError(product_id)

        comment = self.repo.save(CommentModel(product_id=product_id, user_id=user_id, text=text))
        return self._to_dict(comment)

    def list_for_product(self, product_id: int) -> List[Dict[str, Any]]:
        return [self._to_dict(c) for c in self.repo.list_for_product(product_id)]

    def _owned(self, comment_id: int, user_id: int) -> CommentModel:
        comment = self.repo.get_comment(comment_id)
        if not comment:
            raise CommentNotFoundError(comment_id)
        if comment.user_id != user_id:
            raise UnauthorizedError("Unauthorized to modify this comment")
        return comment

    def update(self, comment_id: int, user_id: int, text: str | None) -> Dict[str, Any]:
        comment = self._owned(comment_id, user_id)
        if text:
            comment.text = text
        return self._to_dict(self.repo.save(comment))

    def delete(self, comment_id: int, user_id: int):
        comment = self._owned(comment_id, user_id)
        self.repo.delete(comment)
