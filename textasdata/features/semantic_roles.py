"""
Semantic-role motifs from dependency parses.

Given a spaCy-parsed document and a set of entities of interest (e.g.
"she", "elizabeth"), we collect what the entities do, what is done to
them and how they are described:

- action: the entity is the (active) subject or the passive agent of a
  verb -> the verb lemma
- treatment: the entity is the direct object or the passive subject of a
  verb -> the verb lemma
- characterization: an adjective modifies the entity, or the entity is
  the subject of a copula with an adjectival complement -> the adjective

Parsing itself is delegated to the spaCy pipeline passed in by the caller
(for instance ``spacy.load("en_core_web_sm")``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Set

import pandas as pd
from spacy.language import Language
from spacy.tokens import Doc, Token


ACTION_DEPS = {"nsubj"}
TREATMENT_DEPS = {"dobj", "obj", "nsubjpass"}
CHARACTERIZATION_DEPS = {"amod"}


@dataclass(frozen=True)
class Motif:
    entity: str
    role: str
    word: str


def _entity_key(token: Token, entities: Set[str]) -> Optional[str]:
    for candidate in (token.lower_, token.lemma_.lower()):
        if candidate in entities:
            return candidate
    return None


def _is_verb(token: Token) -> bool:
    return token.pos_ in ("VERB", "AUX") or token.tag_.startswith("VB")


def _lemma(token: Token) -> str:
    return (token.lemma_ or token.text).lower()


def _iter_motifs(token: Token, entity: str) -> Iterator[Motif]:
    head = token.head
    dep = token.dep_

    if dep in ACTION_DEPS and _is_verb(head):
        if head.lemma_.lower() == "be":
            # Copula: "she is clever" describes rather than acts.
            for child in head.children:
                if child.dep_ == "acomp":
                    yield Motif(entity, "characterization", _lemma(child))
        else:
            yield Motif(entity, "action", _lemma(head))

    if dep == "pobj" and head.dep_ == "agent" and _is_verb(head.head):
        # "... was praised by her": the entity acts in a passive clause.
        yield Motif(entity, "action", _lemma(head.head))

    if dep in TREATMENT_DEPS and _is_verb(head):
        yield Motif(entity, "treatment", _lemma(head))

    for child in token.children:
        if child.dep_ in CHARACTERIZATION_DEPS:
            yield Motif(entity, "characterization", _lemma(child))


def extract_motifs(doc: Doc, entities: Iterable[str]) -> List[Motif]:
    """
    Collect the motifs of the given entities in a parsed document, in
    token order.
    """
    wanted = {e.lower() for e in entities}
    motifs: List[Motif] = []
    for token in doc:
        entity = _entity_key(token, wanted)
        if entity is None:
            continue
        motifs.extend(_iter_motifs(token, entity))
    return motifs


def motifs_frame(
    texts: Sequence[str],
    entities: Iterable[str],
    nlp: Language,
    doc_ids: Optional[Sequence[object]] = None,
) -> pd.DataFrame:
    """
    Parse texts with ``nlp`` and return their motifs as a DataFrame with
    columns ["doc_id", "entity", "role", "word"].
    """
    entities = list(entities)
    if doc_ids is None:
        doc_ids = range(len(texts))

    rows = []
    for doc_id, doc in zip(doc_ids, nlp.pipe(texts)):
        for motif in extract_motifs(doc, entities):
            rows.append({"doc_id": doc_id, "entity": motif.entity, "role": motif.role, "word": motif.word})
    return pd.DataFrame(rows, columns=["doc_id", "entity", "role", "word"])
