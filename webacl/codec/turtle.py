"""Read and write ACL documents as Turtle.

Web Access Control stores authorizations as RDF. Each subject typed
``acl:Authorization`` becomes one :class:`AclRule`; any statement about it we
do not understand is kept in the rule's passthrough as a ``(predicate,
object)`` pair, and statements about other subjects are kept on the document.
Nothing is pruned on the way out; call
:meth:`AclDocument.get_minified_rules` first if that is wanted.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from rdflib import BNode, Graph, Namespace, URIRef
from rdflib.namespace import FOAF, RDF
from rdflib.term import Node

from webacl.acl.agents import AgentSet
from webacl.acl.document import AclDocument
from webacl.acl.permissions import ACL_NS, Permission, PermissionSet
from webacl.acl.rule import AclRule
from webacl.utils.errors import CodecError
from webacl.utils.logging import get_logger

logger = get_logger(__name__)

ACL = Namespace(ACL_NS)
DEFAULT_BASE_IRI = "http://localhost/.acl"

Triple = Tuple[Node, Node, Node]


@dataclass
class DecodeResult:
    document: AclDocument
    unrecognized: List[Triple] = field(default_factory=list)


def decode(text: str, base_iri: str = DEFAULT_BASE_IRI, *, default_access_to: Optional[str] = None) -> DecodeResult:
    """Parse Turtle into an :class:`AclDocument`.

    Relative IRIs resolve against ``base_iri``; authorizations named
    ``<base_iri#name>`` are stored under the subject id ``name``.
    Only IRI objects are interpreted. An ``acl:agent "literal"`` and the like
    stay in the rule's passthrough with their term type intact.
    """

    graph = Graph()
    try:
        graph.parse(data=text, format="turtle", publicID=base_iri)
    except Exception as exc:
        raise CodecError(f"Could not parse ACL document: {exc}") from exc

    document = AclDocument(default_access_to)
    authorizations = sorted(set(graph.subjects(RDF.type, ACL.Authorization)), key=str)
    for subject in authorizations:
        if isinstance(subject, BNode):
            subject_id = document.new_subject_id()
        else:
            subject_id = _subject_id(subject, base_iri)
        document.rules[subject_id] = _decode_rule(graph, subject)

    known = set(authorizations)
    for triple in sorted(graph, key=lambda t: tuple(str(term) for term in t)):
        if triple[0] not in known:
            document.add_other(triple)

    logger.debug("decoded ACL document", extra={"count": len(document.rules)})
    return DecodeResult(document=document, unrecognized=list(document.other))


def encode(document: AclDocument, base_iri: str = DEFAULT_BASE_IRI) -> str:
    """Serialise ``document`` to Turtle, relative to ``base_iri``."""

    graph = Graph()
    graph.bind("acl", ACL)
    graph.bind("foaf", FOAF)

    for subject_id, rule in document.rules.items():
        subject = _subject_ref(subject_id, base_iri)
        for predicate, obj in _encode_rule(rule):
            graph.add((subject, predicate, obj))
    for statement in document.other:
        if not (isinstance(statement, tuple) and len(statement) == 3):
            raise CodecError(f"Document statements must be triples, got {statement!r}")
        graph.add(statement)

    return graph.serialize(format="turtle", base=base_iri)


def _decode_rule(graph: Graph, subject: Node) -> AclRule:
    permissions = PermissionSet()
    agents = AgentSet()
    access_to: List[str] = []
    default: Optional[str] = None
    default_for_new: Optional[str] = None
    passthrough: List[Tuple[Node, Node]] = []

    pairs = sorted(graph.predicate_objects(subject), key=lambda pair: (str(pair[0]), str(pair[1])))
    for predicate, obj in pairs:
        if predicate == RDF.type and obj == ACL.Authorization:
            continue
        if not isinstance(obj, URIRef):
            # literals and blank nodes are written back exactly as read
            passthrough.append((predicate, obj))
        elif predicate == ACL.mode:
            permissions.add(Permission.parse(str(obj)))
        elif predicate == ACL.agent:
            agents.add_web_id(str(obj))
        elif predicate == ACL.agentGroup:
            agents.add_group(str(obj))
        elif predicate == ACL.origin:
            agents.add_origin(str(obj))
        elif predicate == ACL.agentClass and obj == FOAF.Agent:
            agents.add_public()
        elif predicate == ACL.agentClass and obj == ACL.AuthenticatedAgent:
            agents.add_authenticated()
        elif predicate == ACL.accessTo:
            access_to.append(str(obj))
        elif predicate == ACL.default and default is None:
            default = str(obj)
        elif predicate == ACL.defaultForNew and default_for_new is None:
            default_for_new = str(obj)
        else:
            passthrough.append((predicate, obj))

    return AclRule(
        permissions,
        agents,
        access_to,
        default=default,
        default_for_new=default_for_new,
        passthrough=passthrough,
    )


def _encode_rule(rule: AclRule) -> List[Tuple[Node, Node]]:
    pairs: List[Tuple[Node, Node]] = [(RDF.type, ACL.Authorization)]
    pairs.extend((ACL.mode, ACL[permission.value]) for permission in rule.permissions)
    pairs.extend((ACL.agent, URIRef(web_id)) for web_id in sorted(rule.agents.web_ids))
    pairs.extend((ACL.agentGroup, URIRef(group)) for group in sorted(rule.agents.groups))
    pairs.extend((ACL.origin, URIRef(origin)) for origin in sorted(rule.agents.origins))
    if rule.agents.has_public():
        pairs.append((ACL.agentClass, FOAF.Agent))
    if rule.agents.has_authenticated():
        pairs.append((ACL.agentClass, ACL.AuthenticatedAgent))
    pairs.extend((ACL.accessTo, URIRef(label)) for label in rule.access_to)
    if rule.default is not None:
        pairs.append((ACL.default, URIRef(rule.default)))
    if rule.default_for_new is not None:
        pairs.append((ACL.defaultForNew, URIRef(rule.default_for_new)))
    for item in rule.passthrough:
        if not (isinstance(item, tuple) and len(item) == 2):
            raise CodecError(f"Rule passthrough must hold (predicate, object) pairs, got {item!r}")
        pairs.append(item)
    return pairs


def _subject_id(subject: Node, base_iri: str) -> str:
    prefix = _document_iri(base_iri) + "#"
    iri = str(subject)
    return iri[len(prefix):] if iri.startswith(prefix) and len(iri) > len(prefix) else iri


def _subject_ref(subject_id: str, base_iri: str) -> URIRef:
    if ":" in subject_id:
        return URIRef(subject_id)
    return URIRef(f"{_document_iri(base_iri)}#{subject_id.lstrip('#')}")


def _document_iri(base_iri: str) -> str:
    return base_iri.split("#", 1)[0]


__all__ = ["ACL", "DEFAULT_BASE_IRI", "DecodeResult", "decode", "encode"]
