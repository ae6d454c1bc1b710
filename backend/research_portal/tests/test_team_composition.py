import uuid

import pytest

from research_portal import models
from research_portal.services import team_composition as tc


def _scientist(title="Investigator"):
    return models.Scientist(id=uuid.uuid4(), name="Dr. Test", email=f"{uuid.uuid4()}@ex.com", title=title)


def _member(scientist, role):
    return models.ProjectMember(id=uuid.uuid4(), scientist_id=scientist.id, role=role)


def test_non_investigator_never_offered_pi():
    options = tc.role_options([], _scientist(title="Research Associate"))
    assert "Principal Investigator" not in [o.role for o in options.options]
    assert options.note == tc.PI_TITLE_NOTE


def test_investigator_offered_all_roles_on_empty_team():
    options = tc.role_options([], _scientist())
    assert [(o.role, o.enabled) for o in options.options] == [
        ("Principal Investigator", True),
        ("Lead Scientist", True),
        ("Team Member", True),
    ]
    assert options.note is None


def test_held_roles_are_disabled_with_reason():
    pi = _scientist()
    lead = _scientist(title="Scientist")
    members = [_member(pi, tc.PRINCIPAL_INVESTIGATOR), _member(lead, tc.LEAD_SCIENTIST)]
    options = {o.role: o for o in tc.role_options(members, _scientist()).options}
    assert not options["Principal Investigator"].enabled
    assert options["Principal Investigator"].reason == "This research activity already has a Principal Investigator"
    assert not options["Lead Scientist"].enabled
    assert options["Team Member"].enabled


def test_second_pi_rejected():
    members = [_member(_scientist(), tc.PRINCIPAL_INVESTIGATOR)]
    with pytest.raises(tc.TeamCompositionError, match="only have one Principal Investigator"):
        tc.check_new_member(members, _scientist(), tc.PRINCIPAL_INVESTIGATOR)


def test_pi_requires_investigator_title():
    with pytest.raises(tc.TeamCompositionError, match="job title 'Investigator'"):
        tc.check_new_member([], _scientist(title="Postdoc"), tc.PRINCIPAL_INVESTIGATOR)


def test_existing_member_rejected():
    scientist = _scientist()
    members = [_member(scientist, tc.TEAM_MEMBER)]
    with pytest.raises(tc.TeamCompositionError, match="already a member"):
        tc.check_new_member(members, scientist, tc.TEAM_MEMBER)


def test_many_team_members_allowed():
    members = [_member(_scientist(), tc.TEAM_MEMBER) for _ in range(3)]
    tc.check_new_member(members, _scientist(title="Technician"), tc.TEAM_MEMBER)
