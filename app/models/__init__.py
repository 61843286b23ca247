from .article import Article, ArticleStatus
from .experiment import Experiment, ExperimentCategory, ExperimentStatus
from .learning_entry import LearningEntry, LearningStatus, LearningDifficulty

__all__ = [
    "Article",
    "ArticleStatus",
    "Experiment",
    "ExperimentCategory",
    "ExperimentStatus",
    "LearningEntry",
    "LearningStatus",
    "LearningDifficulty",
]
