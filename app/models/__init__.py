from app.models.article import Article, ArticleImage, ArticleType
from app.models.doctor import DoctorSummary

__all__ = ["Article", "ArticleImage", "ArticleType", "DoctorSummary"]
