from itertools import chain, combinations

import pytest

from webacl.acl.agents import AgentSet
from webacl.acl.document import AclDocument
from webacl.acl.permissions import APPEND, CONTROL, READ, WRITE, PermissionSet
from webacl.acl.rule import AclRule
from webacl.utils.errors import EmptyReductionError, MissingAccessToError

RESOURCE = "https://pod.example/notes/"
PERMISSIONS = [READ, WRITE, APPEND]
WEB_IDS = ["A", "B", "C"]


def _subsets(items):
    return [list(combo) for combo in chain.from_iterable(combinations(items, n) for n in range(1, len(items) + 1))]


def _granted(document: AclDocument, permission, web_id: str) -> bool:
    return any(
        rule.permissions.has(permission) and rule.agents.has_web_id(web_id) for rule in document.rules.values()
    )


def test_concrete_partial_removal() -> None:
    document = AclDocument(default_access_to=RESOURCE)
    document.add_rule([READ, WRITE], ["A", "B"], subject_id="s1")
    assert document.has_rule(READ, "A")

    document.delete_rule(READ, "A")
    assert not document.has_rule(READ, "A")
    assert document.has_rule(WRITE, "A")
    assert document.has_rule([READ, WRITE], "B")
    assert set(document.rules) == {"s1", "s2"}
    assert document.rules["s1"] == AclRule([READ, WRITE], "B", RESOURCE)
    assert document.rules["s2"] == AclRule(WRITE, "A", RESOURCE)


def test_has_rule_combines_several_rules() -> None:
    document = AclDocument(default_access_to=RESOURCE)
    document.add_rule(READ, ["A", "B"])
    document.add_rule(WRITE, "A")
    assert document.has_rule([READ, WRITE], "A")
    assert not document.has_rule([READ, WRITE], ["A", "B"])
    assert not document.has_rule(CONTROL, "A")
    assert not AclDocument(default_access_to=RESOURCE).has_rule(READ, "A")


@pytest.mark.parametrize(
    "stored",
    [
        [([READ, WRITE], ["A", "B"])],
        [([READ], ["A", "B"]), ([WRITE, APPEND], ["B", "C"])],
        [([READ, WRITE], ["A"]), ([WRITE, APPEND], ["A", "B"]), ([READ], ["C", "B"])],
    ],
)
def test_has_rule_matches_pointwise_coverage(stored) -> None:
    document = AclDocument(default_access_to=RESOURCE)
    for permissions, agents in stored:
        document.add_rule(permissions, agents)

    for permissions in _subsets(PERMISSIONS):
        for agents in _subsets(WEB_IDS):
            expected = all(_granted(document, p, a) for p in permissions for a in agents)
            assert document.has_rule(permissions, agents) is expected, (permissions, agents)


def test_single_fragment_keeps_subject_id() -> None:
    document = AclDocument(default_access_to=RESOURCE)
    document.add_rule([READ, WRITE], "A", subject_id="owner")
    document.delete_by_subject("owner", AclRule(READ, "A"))
    assert list(document.rules) == ["owner"]
    assert document.rules["owner"].permissions == PermissionSet(WRITE)


def test_delete_by_subject_without_rule_drops_the_entry() -> None:
    document = AclDocument(default_access_to=RESOURCE)
    document.add_rule(READ, "A", subject_id="owner")
    document.delete_by_subject("owner")
    document.delete_by_subject("missing")
    assert document.rules == {}


def test_split_fragments_get_derived_ids() -> None:
    document = AclDocument(default_access_to=RESOURCE)
    document.add_rule([READ, WRITE], ["A", "B"], subject_id="owner")
    document.add_rule(READ, "C", subject_id="owner1")
    document.delete_by_subject("owner", AclRule(READ, "A"))
    assert set(document.rules) == {"owner1", "owner2", "owner3"}


def test_delete_then_readd_restores_coverage() -> None:
    document = AclDocument(default_access_to=RESOURCE)
    document.add_rule([READ, WRITE], ["A", "B"], subject_id="s1")
    document.add_rule(APPEND, "C", subject_id="s2")
    before = {
        (p, a): document.has_rule(p, a) for p in PERMISSIONS for a in WEB_IDS
    }
    removed = AclRule(READ, ["A", "C"], RESOURCE)
    original = document.rules["s1"].clone()

    document.delete_by_subject("s1", removed)
    assert not document.has_rule(READ, "A")
    document.add_rule(AclRule.common(original, removed))

    for (p, a), was_granted in before.items():
        assert document.has_rule(p, a) is was_granted


def test_add_rule_overwrites_and_generates_ids() -> None:
    document = AclDocument(default_access_to=RESOURCE)
    assert document.add_rule(READ, "A") == "new-acl-rule-1"
    assert document.add_rule(READ, "B") == "new-acl-rule-2"
    document.add_rule(WRITE, "C", subject_id="new-acl-rule-1")
    assert len(document) == 2
    assert document.rules["new-acl-rule-1"] == AclRule(WRITE, "C", RESOURCE)

    custom = AclDocument(default_access_to=RESOURCE, subject_base="grant")
    assert custom.add_rule(READ, "A") == "grant1"
    custom.add_rule(READ, "A", subject_id="rule-3")
    assert custom.new_subject_id("rule-3") == "rule-4"
    assert custom.new_subject_id("rule-7") == "rule-7"


def test_missing_access_to() -> None:
    document = AclDocument()
    with pytest.raises(MissingAccessToError):
        document.add_rule(READ, "A")
    with pytest.raises(MissingAccessToError):
        document.has_rule(READ, "A")
    document.add_rule(READ, "A", RESOURCE)
    assert document.has_rule(READ, "A", RESOURCE)
    assert document.rules["new-acl-rule-1"].access_to == (RESOURCE,)


def test_deleting_needs_no_access_to() -> None:
    document = AclDocument()
    document.add_rule([READ, WRITE], ["A", "B"], RESOURCE, subject_id="s1")
    document.delete_rule(READ, "A")
    document.delete_agents("B")
    assert list(document.rules) == ["s2"]
    assert document.rules["s2"] == AclRule(WRITE, "A", RESOURCE)
    with pytest.raises(MissingAccessToError):
        document.has_rule(WRITE, "A")


def test_delete_agents_removes_every_permission() -> None:
    document = AclDocument()
    document.add_rule([READ, WRITE], ["A", "B"], RESOURCE)
    document.add_rule(CONTROL, AgentSet("A").add_public(), RESOURCE)
    document.delete_agents("A")
    assert not document.has_rule(READ, "A", RESOURCE)
    assert not document.has_rule(CONTROL, "A", RESOURCE)
    assert document.has_rule([READ, WRITE], "B", RESOURCE)
    assert document.has_rule(CONTROL, AgentSet.everyone(), RESOURCE)


def test_delete_permissions_only_touches_existing_agents() -> None:
    document = AclDocument(default_access_to=RESOURCE)
    document.add_rule([READ, WRITE], "A", subject_id="s1")
    document.add_rule(READ, "B", subject_id="s2")
    document.delete_permissions(READ)
    assert list(document.rules) == ["s1"]
    assert document.rules["s1"] == AclRule(WRITE, "A", RESOURCE)
    with pytest.raises(EmptyReductionError):
        document.get_agents_with(READ)


def test_aggregates() -> None:
    document = AclDocument(default_access_to=RESOURCE)
    document.add_rule(READ, "A")
    document.add_rule(WRITE, "A")
    document.add_rule([READ, CONTROL], ["B", "A"])
    assert document.get_permissions_for("A") == PermissionSet(READ, WRITE, CONTROL)
    assert document.get_permissions_for("B") == PermissionSet(READ, CONTROL)
    assert document.get_agents_with(READ) == AgentSet("A", "B")
    assert document.get_agents_with(WRITE) == AgentSet("A")


def test_aggregates_without_matches_fail() -> None:
    document = AclDocument(default_access_to=RESOURCE)
    with pytest.raises(EmptyReductionError):
        document.get_permissions_for("A")
    document.add_rule(READ, "A")
    with pytest.raises(EmptyReductionError):
        document.get_permissions_for("B")
    with pytest.raises(EmptyReductionError):
        document.get_agents_with(APPEND)


def test_minified_rules_drop_rules_without_effect() -> None:
    document = AclDocument(default_access_to=RESOURCE)
    document.add_rule(READ, "A", subject_id="keep")
    document.add_rule(READ, None, subject_id="nobody")
    document.add_rule(None, "A", subject_id="nothing")
    first = document.get_minified_rules()
    assert list(first) == ["keep"]
    second = document.get_minified_rules()
    assert list(second) == ["keep"]
    assert second["keep"] == AclRule(READ, "A", RESOURCE)


def test_other_statements_are_kept() -> None:
    document = AclDocument()
    document.add_other(("s", "p", "o"))
    assert document.other == [("s", "p", "o")]
