"""Tuneable defaults for authoring and navigation."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ProtocolConfig:
    """Defaults applied by the authoring session and the traversal engine.

    Attributes:
        default_edge_label: Label given to a confirmed edge when the author
            leaves the label blank.
        default_protocol_name: Name of a freshly started authoring draft.
        question_label: Placeholder text of a newly added question node.
        question_id_prefix: Prefix of generated question node ids.
        outcome_id_prefix: Prefix of generated outcome node ids.
        starter_node_id: Id of the placeholder question a seeded draft starts with.
        starter_question_label: Label of that placeholder question.
        strict_root: Raise ``AmbiguousRootError`` instead of falling back to
            the first node when the entry node is not unique.
    """

    default_edge_label: str = "Yes"
    default_protocol_name: str = "New Triage Protocol"
    question_label: str = "New Question"
    question_id_prefix: str = "q"
    outcome_id_prefix: str = "outcome"
    starter_node_id: str = "root-1"
    starter_question_label: str = "New Question?"
    strict_root: bool = False
