"""
Personality engine: archetype and subtype assignment at birth.

The stat profile biases which of eight archetypes a person gets (FM-style),
then a flavor subtype is drawn within the archetype by fixed integer weights.
Assignment happens once, when the person is created, and is never recomputed.
"""

from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel

from .randomness import RandomSource, default_rng, weighted_choice
from .stats import category_average

NORM_LOW = 20
NORM_SPAN = 60
MIN_ARCHETYPE_WEIGHT = 0.05


class PersonalityArchetype(str, Enum):
    VISIONARY = "Visionary"
    LEADER = "Leader"
    PRAGMATIST = "Pragmatist"
    CAREGIVER = "Caregiver"
    REBEL = "Rebel"
    ANALYST = "Analyst"
    OPPORTUNIST = "Opportunist"
    TRADITIONALIST = "Traditionalist"


class PersonalitySubtype(BaseModel):
    id: str
    label: str
    description: str
    weight: int


def _subtypes(prefix: str, rows: List[Tuple[str, str, int]]) -> List[PersonalitySubtype]:
    return [
        PersonalitySubtype(
            id=f"{prefix}_{label.upper().replace('-', '_').replace(' ', '_').replace(chr(39), '')}",
            label=label,
            description=description,
            weight=weight,
        )
        for label, description, weight in rows
    ]


ARCHETYPE_SUBTYPES: Dict[PersonalityArchetype, List[PersonalitySubtype]] = {
    PersonalityArchetype.VISIONARY: _subtypes("VISIONARY", [
        ("Dream Architect", "Builds worlds in their head, not afraid to reshape reality.", 3),
        ("Cultural Visionary", "Shifts values and norms through art, speech, or storytelling.", 3),
        ("Philosopher-Builder", "Deep thinker who pairs lofty ideas with practical frameworks.", 2),
        ("Futurist Optimist", "Always looking toward what society can become.", 3),
        ("Radical Reformer", "Sees flaws everywhere and wants to correct them immediately.", 2),
        ("Idealistic Rebel", "Believes the system must be challenged for progress.", 1),
        ("Inventive Tinkerer", "Obsessed with improving systems through small clever changes.", 3),
    ]),
    PersonalityArchetype.LEADER: _subtypes("LEADER", [
        ("Charismatic Diplomat", "Wins hearts through charm and tact.", 3),
        ("Commanding Presence", "Controls a room with confidence.", 3),
        ("Unshakable Strategist", "Cold, calm, and deeply tactical.", 2),
        ("People's Champion", "Popular among ordinary citizens.", 2),
        ("Ambitious Power-Seeker", "Values influence above all else.", 2),
        ("Heroic Icon", "A symbol of hope, willing to sacrifice for others.", 1),
        ("Iron-Willed Negotiator", "Never yields under pressure.", 2),
    ]),
    PersonalityArchetype.PRAGMATIST: _subtypes("PRAGMATIST", [
        ("Bureaucratic Mastermind", "Thrives in structured organizations.", 3),
        ("Cold Rationalist", "Deals only in facts, not emotion.", 2),
        ("System Technician", "Understands how institutions truly operate.", 3),
        ("Duty-Bound Stabilizer", "Keeps society glued together.", 3),
        ("Reluctant Administrator", "Does the job well, but without passion.", 2),
        ("Efficient Operator", "Optimizes processes relentlessly.", 3),
        ("Policy Mechanic", "Fixes government like an engineer fixes machines.", 2),
    ]),
    PersonalityArchetype.CAREGIVER: _subtypes("CAREGIVER", [
        ("Nurturing Advocate", "Fights for vulnerable groups.", 3),
        ("Community Organizer", "Connects citizens and builds social cohesion.", 3),
        ("Gentle Mediator", "Defuses conflicts with calm understanding.", 3),
        ("Altruistic Healer", "Puts others above themselves.", 1),
        ("Diplomatic Listener", "Understands perspectives deeply before acting.", 2),
        ("Patient Steward", "Manages slow, long-term improvement.", 3),
        ("Moral Compass", "Guided by strong internal ethics.", 1),
    ]),
    PersonalityArchetype.REBEL: _subtypes("REBEL", [
        ("Iconoclast", "Destroys sacred cows; challenges narratives.", 2),
        ("Chaotic Innovator", "Brilliant but unpredictable.", 2),
        ("Dissident Agitator", "Pushes aggressively for rapid change.", 2),
        ("Underground Organizer", "Builds movements away from the public eye.", 2),
        ("Radical Theorist", "Extreme ideological thinker.", 1),
        ("Defiant Cynic", "Believes society is fundamentally corrupt.", 2),
        ("Heroic Dissenter", "Risks everything to challenge injustice.", 1),
    ]),
    PersonalityArchetype.ANALYST: _subtypes("ANALYST", [
        ("Data Engineer Mind", "Thinks in systems and abstractions.", 3),
        ("Meticulous Evaluator", "Never acts without perfect information.", 3),
        ("Silent Observer", "Learns quietly; rarely intervenes.", 3),
        ("Pattern Forecaster", "Predicts trends better than others.", 2),
        ("Skeptical Critic", "Finds flaws and inconsistencies.", 2),
        ("Logical Purist", "Rejects emotional reasoning entirely.", 2),
        ("The Archivist", "Obsessed with documenting everything.", 2),
    ]),
    PersonalityArchetype.OPPORTUNIST: _subtypes("OPPORTUNIST", [
        ("Dealmaker", "Makes connections purely for advantage.", 3),
        ("Silver-Tongue Charmer", "Talks their way out of anything.", 3),
        ("Calculation Gambler", "High-stakes moves with huge payoff.", 2),
        ("Corporate Climber", "Flawless at career advancement.", 3),
        ("Mercenary Strategist", "Aligns with whoever benefits them.", 2),
        ("Vision-Backed Opportunist", "Combines ambition with innovative ideas.", 2),
        ("Crisis Profiteer", "Thrives during chaos.", 1),
    ]),
    PersonalityArchetype.TRADITIONALIST: _subtypes("TRADITIONALIST", [
        ("Cultural Guardian", "Preserves heritage and customs.", 3),
        ("Law-and-Order Advocate", "Values stability above all else.", 3),
        ("Disciplined Conformist", "Follows rules without question.", 3),
        ("Community Elder", "Upholds traditions through wisdom.", 2),
        ("Steadfast Moralist", "Firm ethical foundation; resistant to change.", 2),
        ("Institution Loyalist", "Believes in the legitimacy of major institutions.", 2),
        ("Conservative Pragmatist", "Balances tradition and practicality.", 2),
    ]),
}


def normalize(value: float) -> float:
    """Map the baseline band [20, 80] onto [0, 1]. Values outside extrapolate."""
    return (value - NORM_LOW) / NORM_SPAN


def archetype_weights(stats: Mapping[str, float]) -> Dict[PersonalityArchetype, float]:
    """Raw (unfloored) archetype scores from a stat profile."""
    cognitive = normalize(category_average(stats, "cognitive"))
    social = normalize(category_average(stats, "social"))
    physical = normalize(category_average(stats, "physical"))
    personality = normalize(category_average(stats, "personality"))

    ambition = normalize(stats["ambition"])
    integrity = normalize(stats["integrity"])
    risk = normalize(stats["risk_taking"])
    agree = normalize(stats["agreeableness"])
    creativity = normalize(stats["creativity"])
    leadership = normalize(stats["leadership"])
    charisma = normalize(stats["charisma"])
    empathy = normalize(stats["empathy"])
    stability = normalize(stats["stability"])
    confidence = normalize(stats["confidence"])
    patience = normalize(stats["patience"])
    memory = normalize(stats["memory"])

    return {
        PersonalityArchetype.VISIONARY: (
            cognitive * 0.6 + creativity * 1.0 + ambition * 0.4 + (1 - physical) * 0.1
        ),
        PersonalityArchetype.LEADER: (
            social * 0.7 + charisma * 0.8 + leadership * 1.0 + confidence * 0.5
        ),
        PersonalityArchetype.PRAGMATIST: (
            cognitive * 0.4 + personality * 0.4 + integrity * 0.5 + stability * 0.5 - risk * 0.3
        ),
        PersonalityArchetype.CAREGIVER: (
            empathy * 1.0 + agree * 0.8 + stability * 0.4 + integrity * 0.3
        ),
        PersonalityArchetype.REBEL: (
            risk * 0.8 + (1 - agree) * 0.7 + creativity * 0.4 - stability * 0.5
        ),
        PersonalityArchetype.ANALYST: (
            cognitive * 0.8 - social * 0.2 + patience * 0.3 + memory * 0.5
        ),
        PersonalityArchetype.OPPORTUNIST: (
            ambition * 0.9 + risk * 0.6 + (1 - integrity) * 0.5 + charisma * 0.3
        ),
        PersonalityArchetype.TRADITIONALIST: (
            integrity * 0.8 + stability * 0.6 + patience * 0.5 + agree * 0.3 - risk * 0.4
        ),
    }


def pick_archetype(
    stats: Mapping[str, float], rng: Optional[RandomSource] = None
) -> PersonalityArchetype:
    """Weighted draw over the eight archetypes, each floored at 0.05."""
    rng = rng or default_rng()
    options = [
        (archetype, max(MIN_ARCHETYPE_WEIGHT, weight))
        for archetype, weight in archetype_weights(stats).items()
    ]
    return weighted_choice(rng, options)


def pick_subtype(
    archetype: PersonalityArchetype, rng: Optional[RandomSource] = None
) -> PersonalitySubtype:
    rng = rng or default_rng()
    subtypes = ARCHETYPE_SUBTYPES[PersonalityArchetype(archetype)]
    return weighted_choice(rng, [(subtype, subtype.weight) for subtype in subtypes])


def generate_personality(
    stats: Mapping[str, float], rng: Optional[RandomSource] = None
) -> Tuple[PersonalityArchetype, PersonalitySubtype]:
    """Main entry point: archetype then subtype, both from the same source."""
    rng = rng or default_rng()
    archetype = pick_archetype(stats, rng)
    return archetype, pick_subtype(archetype, rng)
