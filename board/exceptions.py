"""
Domain exceptions raised by the service layer.

Services never raise ``HTTPException`` directly; ``board.main`` registers
handlers that translate these into JSON error responses.
"""


class ArticleNotFoundError(Exception):
    def __init__(self, article_id: int) -> None:
        self.article_id = article_id
        super().__init__(f"Article not found - article_id: {article_id}")


class CommentNotFoundError(Exception):
    def __init__(self, comment_id: int) -> None:
        self.comment_id = comment_id
        super().__init__(f"Comment not found - comment_id: {comment_id}")


class CommentTreeError(ValueError):
    """Raised when a set of comment records cannot form a forest."""

    def __init__(self, message: str, comment_id: int | None = None) -> None:
        self.comment_id = comment_id
        super().__init__(message)
