"""
Concept libraries used to seed extraction.

Two sources:
1. The built-in cross-domain library: reasoning, quantitative, systems and
   methodology concepts that show up in instructional text of any subject.
2. Custom concepts supplied by the caller (inline or as a JSON file).

Library concepts get a large scoring bonus during extraction, so the built-in
list deliberately leaves out words too generic to be useful (set, system,
process, structure, ...).
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger
from pydantic import TypeAdapter

LIBRARY_VERSION = "1.0.0"


@dataclass(frozen=True)
class ConceptDefinition:
    """A known concept with its canonical name and spelling variants."""
    name: str
    category: str
    aliases: tuple[str, ...] = ()
    importance: Optional[str] = None  # expected tier, informational only
    description: str = ""
    misconceptions: tuple[str, ...] = ()

    @property
    def terms(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)


def _concept(name: str, category: str, description: str, *aliases: str) -> ConceptDefinition:
    return ConceptDefinition(name=name, category=category, aliases=tuple(aliases), description=description)


CROSS_DOMAIN_CONCEPTS: tuple[ConceptDefinition, ...] = (
    # Logic and reasoning
    _concept("argument", "Logic and Reasoning", "Set of premises leading to a conclusion"),
    _concept("premise", "Logic and Reasoning", "Statement assumed to be true in an argument", "premises"),
    _concept("inference", "Logic and Reasoning", "Drawing conclusions from evidence or premises", "inferences"),
    _concept("deduction", "Logic and Reasoning", "Reasoning from general to specific", "deductive reasoning"),
    _concept("induction", "Logic and Reasoning", "Reasoning from specific to general", "inductive reasoning"),
    _concept("hypothesis", "Logic and Reasoning", "Testable proposed explanation", "hypotheses"),
    _concept("theory", "Logic and Reasoning", "Well-substantiated explanatory framework", "theories"),
    _concept("fallacy", "Logic and Reasoning", "Error in reasoning", "fallacies", "logical fallacy"),
    # Quantitative reasoning
    _concept("variable", "Mathematics", "Quantity that can change", "variables"),
    _concept("equation", "Mathematics", "Statement of equality between expressions", "equations"),
    _concept("ratio", "Mathematics", "Relative size of two quantities", "ratios"),
    _concept("proportion", "Mathematics", "Equality of two ratios", "proportions"),
    _concept("probability", "Mathematics", "Likelihood of an event", "probabilities"),
    _concept("statistics", "Mathematics", "Collection and interpretation of data", "statistic"),
    _concept("average", "Mathematics", "Central value of a data set", "mean", "averages"),
    # Information
    _concept("entropy", "Information Theory", "Measure of uncertainty"),
    _concept("encoding", "Information Theory", "Converting information into a representation"),
    _concept("decoding", "Information Theory", "Recovering information from a representation"),
    # Systems thinking
    _concept("feedback loop", "Systems Thinking", "Output routed back as input", "feedback loops", "feedback"),
    _concept("equilibrium", "Systems Thinking", "State of balance between forces"),
    _concept("emergence", "Systems Thinking", "Whole exhibiting properties the parts lack", "emergent behavior"),
    _concept("hierarchy", "Systems Thinking", "Arrangement in ranked levels", "hierarchies"),
    # Causality
    _concept("correlation", "Causality", "Statistical association between variables", "correlations"),
    _concept("causation", "Causality", "One event producing another", "causality"),
    _concept("mechanism", "Causality", "Process by which an effect is produced", "mechanisms"),
    # Abstraction
    _concept("abstraction", "Abstraction", "Focusing on essentials while ignoring detail", "abstractions"),
    _concept("representation", "Abstraction", "Depiction of one thing by another", "representations"),
    _concept("analogy", "Abstraction", "Comparison based on shared structure", "analogies"),
    # Methodology
    _concept("experiment", "Methodology", "Controlled test of a hypothesis", "experiments"),
    _concept("observation", "Methodology", "Gathering information through the senses", "observations"),
    _concept("measurement", "Methodology", "Assigning numbers to properties", "measurements"),
    _concept("scientific method", "Methodology", "Systematic procedure for inquiry"),
    _concept("control group", "Methodology", "Baseline group not receiving the treatment", "control groups"),
    _concept("peer review", "Methodology", "Evaluation of work by experts in the field"),
    _concept("synthesis", "Methodology", "Combining parts into a coherent whole"),
    # Cognition
    _concept("working memory", "Cognition", "Limited-capacity store for active processing"),
    _concept("long-term memory", "Cognition", "Durable store of knowledge", "long term memory"),
    _concept("schema", "Cognition", "Organized mental framework", "schemas", "schemata"),
    _concept("metacognition", "Cognition", "Thinking about one's own thinking"),
)

_definitions_adapter = TypeAdapter(list[ConceptDefinition])


def load_custom_concepts(path: Path | str) -> tuple[ConceptDefinition, ...]:
    """
    Load custom concept definitions from a JSON array.

    Each item needs "name" and "category"; "aliases", "importance",
    "description" and "misconceptions" are optional.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Custom concepts file not found: {path}")

    definitions = _definitions_adapter.validate_json(path.read_text(encoding="utf-8"))
    logger.info("Loaded {} custom concepts from {}", len(definitions), path)
    return tuple(definitions)


def build_library(
    include_cross_domain: bool = True,
    custom_concepts: Iterable[ConceptDefinition] = (),
) -> dict[str, ConceptDefinition]:
    """
    Map every normalized term (name or alias) to its definition.

    Custom concepts override cross-domain entries that share a term.
    """
    library: dict[str, ConceptDefinition] = {}
    sources: list[ConceptDefinition] = list(CROSS_DOMAIN_CONCEPTS) if include_cross_domain else []
    sources.extend(custom_concepts)

    for definition in sources:
        for term in definition.terms:
            normalized = term.strip().lower()
            if normalized:
                library[normalized] = definition
    return library
