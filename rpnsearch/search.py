"""
rpnsearch Search Driver

Runs independent worker processes that generate and evaluate random
expressions, reporting every expression whose value lands within
``10 ** -precision`` of the target.

Workers share nothing except the match queue. Only the calling process
writes output, so match lines never interleave.
"""

from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple
import logging
import multiprocessing
import queue
import random
import time
from .core import evaluate, format_number
from .generate import generate

logger = logging.getLogger(__name__)

_POLL_SECONDS = 0.1
_JOIN_SECONDS = 5.0


@dataclass(frozen=True)
class SearchMatch:
    """An expression whose value is within epsilon of the target."""
    ratio: float
    value: float
    expression: str

    def format_line(self) -> str:
        """Render as ``ratio,value,expression`` with round-trip precision."""
        return f"{format_number(self.ratio)},{format_number(self.value)},{self.expression}"


def _print_match(match: SearchMatch) -> None:
    print(match.format_line(), flush=True)


def iter_matches(rng: random.Random, target: float, epsilon: float,
                 min_length: int, max_length: int, min_number: int, max_number: int,
                 max_samples: Optional[int] = None, stop_event=None,
                 sqrt_probability: float = 0.25) -> Iterator[SearchMatch]:
    """
    Generate and evaluate expressions, yielding the ones close to target.

    This is the loop each search worker runs.

    Args:
        rng: Random number generator owned by this loop
        target: Value being approximated
        epsilon: Acceptance radius, a match satisfies ``abs(target - value) < epsilon``
        min_length: Smallest requested expression length (inclusive)
        max_length: Largest requested expression length (exclusive)
        min_number: Smallest literal (inclusive)
        max_number: Largest literal (exclusive)
        max_samples: Number of expressions to try (unbounded if None)
        stop_event: Event that ends the loop once set
        sqrt_probability: Chance of the generator's unary branch

    Yields:
        SearchMatch for every hit
    """
    samples = 0

    while max_samples is None or samples < max_samples:
        if stop_event is not None and stop_event.is_set():
            break

        expression = generate(rng.randrange(min_length, max_length), rng,
                              min_number, max_number, sqrt_probability)
        value = evaluate(expression)
        diff = abs(target - value)
        samples += 1

        if diff < epsilon:
            yield SearchMatch(diff / epsilon, value, str(expression))


def _search_worker(worker_id: int, seed: int, target: float, epsilon: float,
                   min_length: int, max_length: int, min_number: int, max_number: int,
                   max_samples: Optional[int], sqrt_probability: float,
                   matches, stop_event) -> None:
    """Worker process entry point; posts matches and then a ``None`` sentinel."""
    rng = random.Random(seed)
    try:
        for match in iter_matches(rng, target, epsilon, min_length, max_length,
                                  min_number, max_number, max_samples, stop_event,
                                  sqrt_probability):
            matches.put(match)
    except KeyboardInterrupt:
        logger.debug(f"Worker {worker_id} interrupted")
    finally:
        matches.put(None)


def _validate_parameters(min_length: int, max_length: int, min_number: int,
                         max_number: int, workers: int, max_samples: Optional[int]) -> None:
    if min_length < 1:
        raise ValueError(f"min_length must be at least 1, got {min_length}")
    if min_length >= max_length:
        raise ValueError(f"min_length must be below max_length: {min_length} >= {max_length}")
    if min_number >= max_number:
        raise ValueError(f"min_number must be below max_number: {min_number} >= {max_number}")
    if workers < 1:
        raise ValueError(f"At least one worker is required, got {workers}")
    if max_samples is not None and max_samples < 0:
        raise ValueError(f"max_samples must be non-negative, got {max_samples}")


def search(target: float, precision: int, min_length: int, max_length: int,
           min_number: int, max_number: int, workers: int = 10,
           seed: Optional[int] = None, max_samples: Optional[int] = None,
           stop_event=None, emit: Optional[Callable[[SearchMatch], None]] = None,
           sqrt_probability: float = 0.25) -> int:
    """
    Search for expressions approximating ``target`` to ``precision`` decimals.

    Starts ``workers`` processes that each sample the expression space
    independently. The call blocks until ``stop_event`` is set, the process
    receives KeyboardInterrupt, or every worker has used up ``max_samples``.
    With the defaults it runs until interrupted.

    Args:
        target: Value being approximated
        precision: Number of decimal places, epsilon is ``10 ** -precision``
        min_length: Smallest requested expression length (inclusive)
        max_length: Largest requested expression length (exclusive)
        min_number: Smallest literal (inclusive)
        max_number: Largest literal (exclusive)
        workers: Number of worker processes
        seed: Base seed; worker ``i`` uses ``seed + i`` (clock-based if None)
        max_samples: Expressions per worker (unbounded if None)
        stop_event: A ``multiprocessing.Event`` that stops the search once set
        emit: Called in this process for every match (prints to stdout by default)
        sqrt_probability: Chance of the generator's unary branch

    Returns:
        Number of matches emitted

    Raises:
        ValueError: If a range is empty or ``workers < 1``
    """
    _validate_parameters(min_length, max_length, min_number, max_number, workers, max_samples)

    epsilon = 10.0 ** -precision
    emit = emit or _print_match
    stop_event = stop_event if stop_event is not None else multiprocessing.Event()
    matches = multiprocessing.Queue()

    base_seed = seed if seed is not None else time.time_ns()
    processes: List[multiprocessing.Process] = []
    for worker_id in range(workers):
        process = multiprocessing.Process(
            target=_search_worker,
            args=(worker_id, base_seed + worker_id, target, epsilon, min_length, max_length,
                  min_number, max_number, max_samples, sqrt_probability, matches, stop_event),
            daemon=True,
        )
        process.start()
        processes.append(process)

    logger.info(f"Started {workers} search workers: target={target}, epsilon={epsilon:g}, "
                f"length=[{min_length}, {max_length}), numbers=[{min_number}, {max_number})")

    try:
        emitted, finished = _collect(matches, processes, stop_event, emit)
    finally:
        stop_event.set()

    _shutdown(processes, matches, workers - finished)

    logger.info(f"Search finished with {emitted} matches")
    return emitted


def _drain(matches) -> List[Optional[SearchMatch]]:
    """Take everything already sitting in the queue without waiting."""
    items = []
    while True:
        try:
            items.append(matches.get_nowait())
        except queue.Empty:
            return items


def _collect(matches, processes, stop_event,
             emit: Callable[[SearchMatch], None]) -> Tuple[int, int]:
    """
    Emit matches until every worker has signalled or the search is stopped.

    Returns:
        Tuple of (matches emitted, workers that posted their sentinel)
    """
    emitted = 0
    finished = 0
    try:
        while finished < len(processes) and not stop_event.is_set():
            try:
                items = [matches.get(timeout=_POLL_SECONDS)]
            except queue.Empty:
                if any(process.is_alive() for process in processes):
                    continue
                # Dead workers have flushed their last matches into the queue
                items = _drain(matches)
                if not items:
                    logger.warning("All search workers exited without finishing")
                    break

            for match in items:
                if match is None:
                    finished += 1
                    continue

                logger.debug(f"Match: {match.expression} = {match.value}")
                emit(match)
                emitted += 1
    except KeyboardInterrupt:
        logger.info("Search interrupted")

    return emitted, finished


def _shutdown(processes: List[multiprocessing.Process], matches, pending: int) -> None:
    """Drain the queue until every worker has signalled, then join them."""
    deadline = time.monotonic() + _JOIN_SECONDS
    while pending > 0 and time.monotonic() < deadline:
        try:
            if matches.get(timeout=_POLL_SECONDS) is None:
                pending -= 1
        except queue.Empty:
            if not any(process.is_alive() for process in processes):
                break

    for process in processes:
        process.join(timeout=max(0.0, deadline - time.monotonic()))
        if process.is_alive():
            logger.warning(f"Terminating unresponsive worker {process.pid}")
            process.terminate()
            process.join()
