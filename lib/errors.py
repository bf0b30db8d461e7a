"""Reviewer queue exceptions."""


class ReviewerQueueError(Exception):
    """Base exception for the reviewer queue."""


class ConfigurationMissing(ReviewerQueueError):
    """Raised at startup when required settings are absent or invalid."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(
            "Reviewer queue is not loaded due to missing configuration: "
            + ", ".join(missing)
        )


class NoEligibleReviewer(ReviewerQueueError):
    """Every roster member is excluded for this pull request."""


class UpstreamFetchFailure(ReviewerQueueError):
    """GitHub could not be reached or returned something unusable."""


class UpstreamUnavailabilityFailure(ReviewerQueueError):
    """The travel calendar could not be read."""


class PersistenceFailure(ReviewerQueueError):
    """The rotation state could not be loaded or saved."""
