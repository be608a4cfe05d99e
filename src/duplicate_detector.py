"""Batch duplicate detector using a language model.

This module compares one target issue against an arbitrary number of
existing issues by splitting the candidates into bounded-size batches and
asking the model, batch by batch, which candidates look like duplicates.

Key Features:
- Fixed-size batching of candidate issues
- Deterministic prompts (same input, same prompt)
- Strict validation of every batch response
- Per-batch failure isolation: a missing, unparseable or invalid response
  only drops that batch's matches
- Detailed logging of each batch decision

The detection process follows these steps:
1. Build the current issue summary once
2. Split candidates into batches of at most batch_size issues
3. For each batch, build the prompt and call the model
4. Parse and validate the response
5. Append the batch's matches, in order, to the aggregate result

Matches are passed through as returned: no deduplication, sorting or
merging across batches.

Classes:
    DuplicateDetector: Runs the batch pipeline for one target issue
"""

import logging
from typing import Optional, Protocol, Sequence

from batching import chunk
from config import DetectorConfig
from errors import MalformedModelOutput
from models import (
    STATUS_EMPTY,
    STATUS_INVALID_FORMAT,
    STATUS_MATCHED,
    STATUS_NO_RESPONSE,
    STATUS_PARSE_ERROR,
    BatchOutcome,
    CandidateIssue,
    DetectionResult,
    TargetIssue,
)
from prompts import SYSTEM_PROMPT, build_batch_user_content, build_current_issue_summary
from response_validator import parse_model_output

LOG_PREVIEW_CHARS = 200


class InferenceClient(Protocol):
    def complete(self, system_prompt: str, user_prompt: str) -> Optional[str]:
        ...


class DuplicateDetector:
    """Finds likely duplicates of an issue among candidate issues.

    Batches are processed sequentially; one model call is in flight at a
    time and batch i's matches always precede batch i+1's.

    Attributes:
        config (DetectorConfig): Immutable run configuration
        client (InferenceClient): Object performing the model calls
        batch_size (int): Maximum candidates per model call
    """

    def __init__(self, config: DetectorConfig, client: InferenceClient):
        self.config = config
        self.client = client
        self.batch_size = config.batch_size

    def _process_batch(
        self,
        current_issue_summary: str,
        batch_index: int,
        batch: Sequence[CandidateIssue]
    ) -> BatchOutcome:
        """Run one batch through the model and validate the response.

        Never raises for model-side problems; they are reported through
        the outcome status instead.
        """
        user_content = build_batch_user_content(current_issue_summary, batch_index, batch)
        logging.info(f"User Content (batch {batch_index}): {user_content[:LOG_PREVIEW_CHARS]}...")

        response = self.client.complete(SYSTEM_PROMPT, user_content)
        if not response:
            logging.warning(f"No AI response for batch {batch_index}")
            return BatchOutcome(
                index=batch_index,
                size=len(batch),
                status=STATUS_NO_RESPONSE,
                error="No AI response",
            )

        logging.info(f"AI response (batch {batch_index}): {response[:LOG_PREVIEW_CHARS]}")

        try:
            matches = parse_model_output(response)
        except MalformedModelOutput as e:
            status = STATUS_PARSE_ERROR if e.not_json else STATUS_INVALID_FORMAT
            logging.warning(f"Batch {batch_index}: {str(e)}")
            logging.debug(f"Offending output (batch {batch_index}): {e.raw_text}")
            return BatchOutcome(index=batch_index, size=len(batch), status=status, error=str(e))

        if not matches:
            logging.info(f"Batch {batch_index}: no similar issues reported")
            return BatchOutcome(index=batch_index, size=len(batch), status=STATUS_EMPTY)

        logging.info(
            f"Batch {batch_index}: {len(matches)} similar issue(s) - "
            + ", ".join(f"#{m.issue} ({m.likelihood})" for m in matches)
        )
        return BatchOutcome(index=batch_index, size=len(batch), status=STATUS_MATCHED, matches=matches)

    def detect(self, target: TargetIssue, candidates: Sequence[CandidateIssue]) -> DetectionResult:
        """Check the target issue against all candidates.

        Args:
            target (TargetIssue): Issue being checked
            candidates (Sequence[CandidateIssue]): Already filtered issues to compare against

        Returns:
            DetectionResult: One outcome per batch, in batch order. Its
                             matches property is the aggregate result.
        """
        current_issue_summary = build_current_issue_summary(target.number, target.title, target.body)
        batches = chunk(candidates, self.batch_size)
        logging.info(
            f"Processing {len(batches)} batch(es) of candidate issues (batch size = {self.batch_size})."
        )

        result = DetectionResult()
        for i, batch in enumerate(batches, 1):
            result.outcomes.append(self._process_batch(current_issue_summary, i, batch))

        failed = result.failed_batches
        if failed:
            logging.warning(
                f"{len(failed)}/{result.batch_count} batch(es) failed: "
                + ", ".join(f"#{o.index} ({o.status})" for o in failed)
            )
        logging.info(f"Total parsed similar issues from AI: {len(result.matches)}")
        return result
