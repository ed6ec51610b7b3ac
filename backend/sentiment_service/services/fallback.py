"""
Fallback Chain

Ordered list of strategies tried one after another until one succeeds.
Used wherever an external collaborator has a local replacement:

- sentiment: external classifier -> local keyword heuristic
- translation: generative service -> unchanged text
- summary: generative service -> templated sentence
- persistence: remote document store -> local store

A strategy reports a recoverable miss by raising RecoverableError (or one of
the exception types the chain was told to treat as recoverable). Anything
else propagates immediately. When every strategy misses, the last error is
raised.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Optional, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RecoverableError(Exception):
    """A strategy could not produce a result but the next one may."""
    pass


@dataclass
class Strategy(Generic[T]):
    """
    Named attempt in a fallback chain.

    Attributes:
        name: Label used in logs and in the chain outcome
        attempt: Callable taking the chain payload and returning a result
    """
    name: str
    attempt: Callable[[Any], T]


@dataclass
class ChainOutcome(Generic[T]):
    """Result of a chain run together with the strategy that produced it"""
    value: T
    strategy: str
    errors: List[Tuple[str, Exception]]

    @property
    def used_fallback(self) -> bool:
        return bool(self.errors)


class FallbackChain(Generic[T]):
    """
    Tries strategies in order and returns the first success.

    Example:
        >>> chain = FallbackChain("sentiment", [
        ...     Strategy("huggingface", remote.classify),
        ...     Strategy("local", local.classify),
        ... ])
        >>> outcome = chain.run("great product")
        >>> outcome.strategy
        'huggingface'
    """

    def __init__(
        self,
        name: str,
        strategies: List[Strategy[T]],
        recoverable: Tuple[Type[BaseException], ...] = (RecoverableError,)
    ):
        if not strategies:
            raise ValueError("FallbackChain needs at least one strategy")
        self.name = name
        self.strategies = list(strategies)
        self.recoverable = recoverable

    def run(self, payload: Any) -> ChainOutcome[T]:
        """
        Run strategies in order.

        Raises:
            The last strategy's recoverable error when all of them miss.
            Any non-recoverable error as soon as it happens.
        """
        errors: List[Tuple[str, Exception]] = []
        last_error: Optional[Exception] = None

        for strategy in self.strategies:
            try:
                value = strategy.attempt(payload)
            except self.recoverable as e:
                last_error = e
                errors.append((strategy.name, e))
                logger.warning(
                    f"[{self.name}] strategy '{strategy.name}' failed: "
                    f"{type(e).__name__}: {e}"
                )
                continue

            if errors:
                logger.info(f"[{self.name}] fell back to '{strategy.name}'")
            return ChainOutcome(value=value, strategy=strategy.name, errors=errors)

        logger.error(f"[{self.name}] all {len(self.strategies)} strategies failed")
        raise last_error

    def __call__(self, payload: Any) -> T:
        return self.run(payload).value
