from datetime import date

import pytest

from research_portal.services.ibc_review import IBC_WORKFLOW
from research_portal.services.publications import PUBLICATION_WORKFLOW, PUBLICATION_STATUSES
from research_portal.workflow import (
    FieldRequirement,
    MissingRequiredFields,
    TransitionNotAllowed,
    WorkflowDefinition,
    diff_fields,
    is_blank,
)

IBC_TABLE = {
    "draft": ("submitted",),
    "submitted": ("vetted", "draft"),
    "vetted": ("under_review", "submitted"),
    "under_review": ("active", "vetted"),
    "active": ("expired",),
    "expired": (),
}


@pytest.mark.parametrize("state,expected", IBC_TABLE.items())
def test_ibc_offered_statuses_match_table(state, expected):
    assert IBC_WORKFLOW.allowed_next(state) == expected


def test_ibc_expired_is_terminal():
    assert IBC_WORKFLOW.is_terminal("expired")
    assert not IBC_WORKFLOW.is_terminal("active")


def test_transition_outside_table_rejected():
    with pytest.raises(TransitionNotAllowed) as excinfo:
        IBC_WORKFLOW.check_transition("draft", "active")
    assert str(excinfo.value) == 'Invalid status transition from "draft" to "active"'


def test_unknown_state_offers_nothing():
    assert IBC_WORKFLOW.allowed_next("archived") == ()


def test_publication_published_is_terminal():
    assert PUBLICATION_WORKFLOW.allowed_next("Published") == ()
    assert PUBLICATION_WORKFLOW.is_terminal("Published")


def test_publication_missing_status_treated_as_concept():
    assert PUBLICATION_WORKFLOW.allowed_next(None) == ("Complete Draft",)


def test_vetted_branches_to_both_submission_paths():
    assert set(PUBLICATION_WORKFLOW.allowed_next("Vetted for submission")) == {
        "Submitted for review with pre-publication",
        "Submitted for review without pre-publication",
    }


def test_every_publication_status_is_declared():
    assert set(PUBLICATION_WORKFLOW.states) == set(PUBLICATION_STATUSES)


def test_missing_fields_lists_every_message():
    record = {"publication_date": None, "doi": "  "}
    with pytest.raises(MissingRequiredFields) as excinfo:
        PUBLICATION_WORKFLOW.check_transition("Accepted/In Press", "Published", record)
    assert excinfo.value.fields == ["publication_date", "doi"]
    assert "DOI is required" in str(excinfo.value)
    assert "Publication date is required" in str(excinfo.value)


def test_ip_office_flag_false_counts_as_missing():
    with pytest.raises(MissingRequiredFields):
        PUBLICATION_WORKFLOW.check_transition(
            "Complete Draft",
            "Vetted for submission",
            {"vetted_for_submission_by_ip_office": False},
        )
    PUBLICATION_WORKFLOW.check_transition(
        "Complete Draft",
        "Vetted for submission",
        {"vetted_for_submission_by_ip_office": True},
    )


def test_custom_definition_guards():
    flow = WorkflowDefinition(
        name="demo",
        initial="open",
        transitions={"open": ("closed",), "closed": ()},
        requirements={"closed": (FieldRequirement("resolution", "Resolution needed"),)},
    )
    assert flow.can_transition("open", "closed")
    assert not flow.can_transition("closed", "open")
    with pytest.raises(MissingRequiredFields, match="Resolution needed"):
        flow.check_transition("open", "closed", {"resolution": ""})


def test_is_blank():
    assert is_blank(None)
    assert is_blank("   ")
    assert is_blank([])
    assert is_blank(False)
    assert not is_blank(0)
    assert not is_blank("x")


def test_diff_fields_renders_values():
    old = {"journal": None, "publication_date": date(2024, 1, 2), "doi": "10.1/a"}
    new = {"journal": "Nature", "publication_date": date(2024, 1, 2), "doi": "10.1/b"}
    changes = diff_fields(old, new)
    assert [(c.field, c.old_value, c.new_value) for c in changes] == [
        ("journal", "", "Nature"),
        ("doi", "10.1/a", "10.1/b"),
    ]


def test_diff_fields_limited_to_named_fields():
    changes = diff_fields({"a": 1, "b": 2}, {"a": 3, "b": 4}, fields=["b"])
    assert [c.field for c in changes] == ["b"]
