"""Prospect scoring for youth scouting.

Pure functions over a person's potential and a handful of stats. Nothing here
mutates a person.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from .config import Config
from .schemas import Enrollment, Person, SchoolLevel, WorldSnapshot

GRADE_THRESHOLDS = (
    (85, "A"),
    (70, "B"),
    (55, "C"),
)
LOWEST_GRADE = "D"


class ProspectScore(BaseModel):
    score: int = Field(..., ge=0, le=100)
    grade: str


class YouthProspect(BaseModel):
    """One row of a country's youth scouting table."""

    person_id: int
    name: str
    age: int
    overall: int
    potential_overall: int
    score: int
    grade: str
    # None when not currently enrolled anywhere
    education_level: Optional[SchoolLevel] = None


def grade_for_score(score: float) -> str:
    """A >= 85, B >= 70, C >= 55, else D."""
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return LOWEST_GRADE


def compute_prospect_score(person: Person) -> ProspectScore:
    stats = person.stats
    academic = (stats.intelligence + stats.creativity + stats.discipline) / 3
    social = (stats.leadership + stats.charisma) / 2
    drive = (stats.ambition + stats.stability) / 2

    raw = (
        0.5 * person.potential_overall
        + 0.3 * academic
        + 0.15 * social
        + 0.05 * drive
    )
    score = int(round(max(0.0, min(100.0, raw))))
    return ProspectScore(score=score, grade=grade_for_score(score))


def _current_level(enrollments: List[Enrollment], person_id: int) -> Optional[SchoolLevel]:
    for enrollment in enrollments:
        if enrollment.person_id == person_id and enrollment.is_active:
            return enrollment.level
    return None


def youth_prospects(
    snapshot: WorldSnapshot,
    country_id: int,
    year: int,
    min_age: Optional[int] = None,
    max_age: Optional[int] = None,
) -> List[YouthProspect]:
    """Score every living person of the country inside the youth age band.

    Sorted by score descending, then person id, so the table is stable between
    calls on the same snapshot.
    """
    min_age = Config.YOUTH_MIN_AGE if min_age is None else min_age
    max_age = Config.YOUTH_MAX_AGE if max_age is None else max_age

    rows: List[YouthProspect] = []
    for person in snapshot.living_persons():
        if person.country_id != country_id:
            continue
        age = person.age_in(year)
        if age < min_age or age > max_age:
            continue
        prospect = compute_prospect_score(person)
        rows.append(
            YouthProspect(
                person_id=person.id,
                name=person.name,
                age=age,
                overall=person.overall,
                potential_overall=person.potential_overall,
                score=prospect.score,
                grade=prospect.grade,
                education_level=_current_level(snapshot.enrollments, person.id),
            )
        )

    rows.sort(key=lambda row: (-row.score, row.person_id))
    return rows
