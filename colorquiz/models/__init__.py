"""Document models for Color Quiz."""

from colorquiz.models.answer import Answer
from colorquiz.models.attempt import AssignedQuestion, Attempt, OptionOrder
from colorquiz.models.question import Option, Question
from colorquiz.models.ranking import QuestionRanking, RankedAnswer, Ranking, RankingSession
from colorquiz.models.score import CategoryScore, Progress, ScoreResult

__all__ = [
    "Answer",
    "AssignedQuestion",
    "Attempt",
    "CategoryScore",
    "Option",
    "OptionOrder",
    "Progress",
    "Question",
    "QuestionRanking",
    "RankedAnswer",
    "Ranking",
    "RankingSession",
    "ScoreResult",
]
