"""
Sentiment Classification Service

Produces a probability distribution over POSITIVE / NEGATIVE / NEUTRAL.

Two classifiers are chained:
1. Hugging Face hosted model (only when an API key is configured)
2. Local keyword heuristic (always available, never fails)

Both return scores for all three labels in canonical order, normalized to
sum to 1.
"""

import logging
import re
from typing import Dict, List, Optional

from sentiment_service.models.schemas import PrimarySentiment, SentimentLabel, SentimentScore
from sentiment_service.services.fallback import FallbackChain, Strategy
from sentiment_service.services.huggingface_client import (
    HuggingFaceClient,
    HuggingFaceClientError,
)

logger = logging.getLogger(__name__)


CANONICAL_ORDER = [SentimentLabel.POSITIVE, SentimentLabel.NEGATIVE, SentimentLabel.NEUTRAL]

POSITIVE_WORDS = frozenset([
    'excellent', 'amazing', 'great', 'wonderful', 'fantastic', 'awesome', 'brilliant',
    'perfect', 'outstanding', 'superb', 'magnificent', 'incredible', 'remarkable',
    'good', 'nice', 'beautiful', 'lovely', 'happy', 'excited', 'pleased', 'satisfied',
    'delighted', 'thrilled', 'love', 'adore', 'enjoy', 'recommend', 'impressive',
    'stunning', 'marvelous', 'spectacular', 'exceptional', 'phenomenal',
])

NEGATIVE_WORDS = frozenset([
    'terrible', 'awful', 'horrible', 'disgusting', 'worst', 'hate', 'disappointing',
    'pathetic', 'useless', 'garbage', 'trash', 'bad', 'poor', 'sad', 'angry',
    'frustrated', 'annoying', 'irritating', 'boring', 'stupid', 'ridiculous',
    'expensive', 'overpriced', 'slow', 'broken', 'defective', 'faulty', 'reject',
    'regret', 'waste', 'nightmare', 'disaster', 'catastrophe',
])

NEUTRAL_WORDS = frozenset([
    'okay', 'fine', 'average', 'normal', 'standard', 'typical', 'regular',
    'moderate', 'fair', 'adequate', 'acceptable', 'reasonable', 'ordinary',
])

NEGATION_WORDS = frozenset([
    'not', 'no', 'never', 'nothing', 'nobody', 'neither', 'nor', 'none',
    'hardly', 'barely', 'without', 'cannot',
])

INTENSIFIER_WORDS = frozenset([
    'very', 'really', 'absolutely', 'extremely', 'so', 'totally', 'truly',
    'incredibly', 'highly', 'completely', 'super',
])

TOKEN_PATTERN = re.compile(r"[a-z]+(?:'[a-z]+)?")


def normalize_scores(raw: Dict[SentimentLabel, float]) -> List[SentimentScore]:
    """
    Turn raw per-label weights into a distribution in canonical order.

    Missing labels count as 0. A non-positive total becomes a uniform split.
    """
    values = [max(float(raw.get(label, 0.0)), 0.0) for label in CANONICAL_ORDER]
    total = sum(values)
    if total <= 0:
        values = [1.0] * len(CANONICAL_ORDER)
        total = float(len(CANONICAL_ORDER))
    return [
        SentimentScore(label=label, score=value / total)
        for label, value in zip(CANONICAL_ORDER, values)
    ]


def get_primary_sentiment(scores: Optional[List[SentimentScore]]) -> PrimarySentiment:
    """
    Pick the highest-scoring label.

    Ties go to the entry encountered first. An empty or missing list yields
    NEUTRAL with confidence 0.5.
    """
    if not scores:
        return PrimarySentiment(label=SentimentLabel.NEUTRAL, confidence=0.5)

    best = scores[0]
    for score in scores[1:]:
        if score.score > best.score:
            best = score
    return PrimarySentiment(label=best.label, confidence=best.score)


class LocalSentimentAnalyzer:
    """
    Keyword-based sentiment heuristic

    Rules:
    - every positive / negative keyword hit counts 1, a neutral hit 0.5
    - negations ("not", "never", "don't", ...) dampen positive and negative
      weight and add neutral weight
    - intensifiers ("very", "absolutely", ...) amplify positive and negative weight
    - text with no keyword hits leans on punctuation: exclamation marks or
      heavy capitalization lean mildly positive, question marks lean neutral,
      anything else splits evenly
    - a small base weight is added to every label before normalizing
    """

    def __init__(
        self,
        neutral_weight: float = 0.5,
        negation_damping: float = 0.5,
        intensifier_boost: float = 0.5,
        base_weight: float = 0.1
    ):
        self.neutral_weight = neutral_weight
        self.negation_damping = negation_damping
        self.intensifier_boost = intensifier_boost
        self.base_weight = base_weight

    @staticmethod
    def tokenize(text: str) -> List[str]:
        return TOKEN_PATTERN.findall((text or '').lower())

    @staticmethod
    def is_negation(token: str) -> bool:
        return token in NEGATION_WORDS or token.endswith("n't")

    def analyze(self, text: str) -> List[SentimentScore]:
        """
        Score text with the keyword heuristic

        Args:
            text: Text to score (English works best)

        Returns:
            Normalized scores in canonical order
        """
        tokens = self.tokenize(text)

        positive = float(sum(1 for t in tokens if t in POSITIVE_WORDS))
        negative = float(sum(1 for t in tokens if t in NEGATIVE_WORDS))
        neutral = self.neutral_weight * sum(1 for t in tokens if t in NEUTRAL_WORDS)

        if positive == 0 and negative == 0 and neutral == 0:
            return normalize_scores(self._punctuation_lean(text or ''))

        negations = sum(1 for t in tokens if self.is_negation(t))
        intensifiers = sum(1 for t in tokens if t in INTENSIFIER_WORDS)

        if intensifiers:
            factor = 1 + self.intensifier_boost * min(intensifiers, 3)
            positive *= factor
            negative *= factor

        if negations:
            damping = self.negation_damping ** min(negations, 3)
            moved = (positive + negative) * (1 - damping)
            positive *= damping
            negative *= damping
            neutral += moved

        logger.debug(
            f"Local sentiment weights pos={positive:.2f} neg={negative:.2f} "
            f"neu={neutral:.2f} (negations={negations}, intensifiers={intensifiers})"
        )

        return normalize_scores({
            SentimentLabel.POSITIVE: positive + self.base_weight,
            SentimentLabel.NEGATIVE: negative + self.base_weight,
            SentimentLabel.NEUTRAL: neutral + self.base_weight,
        })

    @staticmethod
    def _punctuation_lean(text: str) -> Dict[SentimentLabel, float]:
        letters = [c for c in text if c.isalpha()]
        caps_ratio = sum(1 for c in letters if c.isupper()) / len(letters) if letters else 0.0

        if '!' in text or (len(letters) >= 4 and caps_ratio > 0.5):
            return {
                SentimentLabel.POSITIVE: 0.45,
                SentimentLabel.NEGATIVE: 0.2,
                SentimentLabel.NEUTRAL: 0.35,
            }
        if '?' in text:
            return {
                SentimentLabel.POSITIVE: 0.25,
                SentimentLabel.NEGATIVE: 0.2,
                SentimentLabel.NEUTRAL: 0.55,
            }
        return {label: 1.0 for label in CANONICAL_ORDER}


class SentimentClassifier:
    """
    Classifies text with the hosted model, falling back to the local heuristic

    Example:
        >>> classifier = SentimentClassifier()
        >>> scores = classifier.classify("I absolutely love this")
        >>> get_primary_sentiment(scores).label
        <SentimentLabel.POSITIVE: 'POSITIVE'>
    """

    def __init__(
        self,
        remote_client: Optional[HuggingFaceClient] = None,
        local_analyzer: Optional[LocalSentimentAnalyzer] = None
    ):
        self.remote_client = remote_client or HuggingFaceClient()
        self.local_analyzer = local_analyzer or LocalSentimentAnalyzer()

        strategies = []
        if self.remote_client.enabled:
            strategies.append(Strategy("huggingface", self._classify_remote))
        strategies.append(Strategy("local", self.local_analyzer.analyze))

        self.chain = FallbackChain(
            "sentiment",
            strategies,
            recoverable=(HuggingFaceClientError,)
        )
        logger.info(
            f"SentimentClassifier initialized with strategies: "
            f"{[s.name for s in self.chain.strategies]}"
        )

    def _classify_remote(self, text: str) -> List[SentimentScore]:
        return normalize_scores(self.remote_client.classify(text))

    def classify(self, text: str) -> List[SentimentScore]:
        """
        Classify text

        Returns:
            Scores for all three labels, in canonical order, summing to 1
        """
        outcome = self.chain.run(text)
        logger.debug(f"Sentiment classified by '{outcome.strategy}'")
        return outcome.value

    def health_check(self) -> str:
        return "remote" if self.remote_client.enabled else "local"
