import pytest

from newsdesk.core.errors import ForbiddenError, InvalidTransitionError, ValidationError
from newsdesk.models import ArticleStatus, UserRole
from newsdesk.services.status import (
    allowed_targets,
    is_all_statuses,
    normalize_status,
    parse_status,
    validate_transition,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Published", ArticleStatus.PUBLISHED),
        ("PUBLISHED", ArticleStatus.PUBLISHED),
        ("live", ArticleStatus.PUBLISHED),
        ("Approved", ArticleStatus.PUBLISHED),
        ("pending_review", ArticleStatus.PENDING_REVIEW),
        ("pending-review", ArticleStatus.PENDING_REVIEW),
        ("  Pending   Review ", ArticleStatus.PENDING_REVIEW),
        ("submitted", ArticleStatus.PENDING_REVIEW),
        ("awaiting-review", ArticleStatus.PENDING_REVIEW),
        ("declined", ArticleStatus.REJECTED),
        ("DENIED", ArticleStatus.REJECTED),
        ("draft", ArticleStatus.DRAFT),
        (ArticleStatus.REJECTED, ArticleStatus.REJECTED),
    ],
)
def test_normalize_status_synonyms(raw, expected):
    assert normalize_status(raw) == expected
    assert parse_status(raw) == expected


@pytest.mark.parametrize("raw", ["", "banana", None, 42, "publishedd"])
def test_unrecognized_status_defaults_to_draft(raw):
    assert normalize_status(raw) == ArticleStatus.DRAFT
    with pytest.raises(ValidationError):
        parse_status(raw)


def test_all_marker():
    assert is_all_statuses("ALL")
    assert is_all_statuses(" all ")
    assert not is_all_statuses("Published")
    assert not is_all_statuses(None)


class TestTransitions:
    @pytest.mark.parametrize("role", [UserRole.EDITOR, UserRole.ADMIN])
    @pytest.mark.parametrize("current", list(ArticleStatus))
    @pytest.mark.parametrize("target", list(ArticleStatus))
    def test_editors_may_set_any_status(self, current, target, role):
        validate_transition(current, target, role)

    @pytest.mark.parametrize("current", [ArticleStatus.DRAFT, ArticleStatus.REJECTED])
    def test_author_submits_for_review(self, current):
        validate_transition(current, ArticleStatus.PENDING_REVIEW, UserRole.AUTHOR)

    @pytest.mark.parametrize("current", [ArticleStatus.PENDING_REVIEW, ArticleStatus.PUBLISHED])
    def test_author_resubmit_from_wrong_state(self, current):
        with pytest.raises(InvalidTransitionError):
            validate_transition(current, ArticleStatus.PENDING_REVIEW, UserRole.AUTHOR)

    @pytest.mark.parametrize("target", [ArticleStatus.PUBLISHED, ArticleStatus.REJECTED, ArticleStatus.DRAFT])
    def test_author_cannot_decide(self, target):
        with pytest.raises(ForbiddenError):
            validate_transition(ArticleStatus.PENDING_REVIEW, target, UserRole.AUTHOR)

    def test_public_role_cannot_move_anything(self):
        with pytest.raises(ForbiddenError):
            validate_transition(ArticleStatus.DRAFT, ArticleStatus.PENDING_REVIEW, UserRole.PUBLIC)

    def test_allowed_targets(self):
        assert allowed_targets(ArticleStatus.DRAFT, UserRole.EDITOR) == list(ArticleStatus)
        assert allowed_targets(ArticleStatus.DRAFT, UserRole.AUTHOR) == [ArticleStatus.PENDING_REVIEW]
        assert allowed_targets(ArticleStatus.PENDING_REVIEW, UserRole.AUTHOR) == []
        assert allowed_targets(ArticleStatus.DRAFT, UserRole.PUBLIC) == []
