"""In-memory store for live wizards and submitted intakes."""

from __future__ import annotations

from hausee.intake.engine import IntakeWizard
from hausee.intake.models import SubmittedIntake


class IntakeStore:
    """In-memory dict store for wizards and submissions.

    Suitable for single-instance deployment. Submitted records are handed to
    the hosted database by the caller; this store only keeps them for lookup.
    """

    def __init__(self) -> None:
        self._wizards: dict[str, IntakeWizard] = {}
        self._submissions: dict[str, SubmittedIntake] = {}

    # -- Wizards --

    def save_wizard(self, wizard: IntakeWizard) -> None:
        self._wizards[wizard.id] = wizard

    def get_wizard(self, wizard_id: str) -> IntakeWizard | None:
        return self._wizards.get(wizard_id)

    def find_wizard(self, user_id: str, draft_key: str) -> IntakeWizard | None:
        """Return the open wizard for a user's draft key, if any."""
        for wizard in self._wizards.values():
            if (
                wizard.identity.user_id == user_id
                and wizard.draft_key == draft_key
                and wizard.submission is None
            ):
                return wizard
        return None

    # -- Submissions --

    def save_submission(
        self, submission: SubmittedIntake, wizard_id: str | None = None
    ) -> None:
        """Keep the submission and drop the wizard that produced it."""
        self._submissions[submission.id] = submission
        if wizard_id is not None:
            self._wizards.pop(wizard_id, None)

    def get_submission(self, submission_id: str) -> SubmittedIntake | None:
        return self._submissions.get(submission_id)
