"""
Company and country performance aggregation.

Two halves:
- Write side (called by the tick): ``compute_company_performance`` and
  ``compute_country_performance`` build the append-only yearly rows from the
  active company positions of a snapshot.
- Read side: ``country_performance_summary`` and ``world_standings`` summarise
  rows that already exist for a year. They never modify the snapshot.

Known industries are TECH, FINANCE and RESEARCH. Any other industry string is
bucketed as OTHER so new industries are still counted.
"""

from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel

from .schemas import (
    CompanyYearPerformance,
    CountryYearPerformance,
    Person,
    WorldSnapshot,
)

CORE_INDUSTRIES: Tuple[str, ...] = ("TECH", "FINANCE", "RESEARCH")
OTHER_INDUSTRY = "OTHER"
TOP_COMPANY_LIMIT = 5

OUTPUT_WEIGHTS = {"talent": 0.5, "leadership": 0.3, "reliability": 0.2}


def bucket_industry(industry: str) -> str:
    return industry if industry in CORE_INDUSTRIES else OTHER_INDUSTRY


def tier_multiplier(rank: int) -> float:
    """Executives count more: rank <= 1 x1.4, rank <= 5 x1.15, else x1.0."""
    if rank <= 1:
        return 1.4
    if rank <= 5:
        return 1.15
    return 1.0


def person_components(person: Person) -> Tuple[float, float, float]:
    """Return ``(talent, leadership, reliability)`` for one position holder."""
    s = person.stats
    talent = (
        0.35 * s.intelligence
        + 0.2 * s.creativity
        + 0.2 * s.judgment
        + 0.15 * s.memory
        + 0.1 * s.adaptability
    )
    leadership = (
        0.4 * s.leadership
        + 0.3 * s.charisma
        + 0.2 * s.communication
        + 0.1 * s.negotiation
    )
    reliability = 0.5 * s.discipline + 0.25 * s.integrity + 0.25 * s.stability
    return talent, leadership, reliability


def output_score(talent: float, leadership: float, reliability: float) -> float:
    return (
        OUTPUT_WEIGHTS["talent"] * talent
        + OUTPUT_WEIGHTS["leadership"] * leadership
        + OUTPUT_WEIGHTS["reliability"] * reliability
    )


def compute_company_performance(
    snapshot: WorldSnapshot, year: int
) -> List[CompanyYearPerformance]:
    """Build one performance row per company for ``year``.

    Component scores are summed over active positions, each weighted by the
    role's tier multiplier. A company with nobody in its ladder still gets a
    row, with every score at zero.
    """
    persons = {p.id: p for p in snapshot.persons}
    roles = {r.id: r for r in snapshot.roles}

    sums: Dict[int, List[float]] = defaultdict(lambda: [0.0, 0.0, 0.0])
    for position in snapshot.positions:
        if not position.is_active:
            continue
        person = persons.get(position.person_id)
        role = roles.get(position.role_id)
        if person is None or role is None:
            continue
        multiplier = tier_multiplier(role.rank)
        talent, leadership, reliability = person_components(person)
        totals = sums[position.company_id]
        totals[0] += talent * multiplier
        totals[1] += leadership * multiplier
        totals[2] += reliability * multiplier

    rows: List[CompanyYearPerformance] = []
    for company in sorted(snapshot.companies, key=lambda c: c.id):
        talent, leadership, reliability = sums.get(company.id, (0.0, 0.0, 0.0))
        rows.append(
            CompanyYearPerformance(
                company_id=company.id,
                world_id=snapshot.world_id,
                year=year,
                talent_score=talent,
                leadership_score=leadership,
                reliability_score=reliability,
                output_score=output_score(talent, leadership, reliability),
            )
        )
    return rows


def _rows_for_year(snapshot: WorldSnapshot, year: int) -> Dict[int, CompanyYearPerformance]:
    return {row.company_id: row for row in snapshot.company_performances if row.year == year}


def compute_country_performance(
    snapshot: WorldSnapshot,
    year: int,
    company_rows: Optional[List[CompanyYearPerformance]] = None,
) -> List[CountryYearPerformance]:
    """Roll company rows up into one ranked row per country.

    ``company_rows`` defaults to the rows already stored on the snapshot for
    ``year``. Countries are ranked by total output, ties broken by country id.
    """
    if company_rows is None:
        by_company = _rows_for_year(snapshot, year)
    else:
        by_company = {row.company_id: row for row in company_rows}

    totals: Dict[int, Dict[str, float]] = {
        country.id: {"count": 0, "output": 0.0, "talent": 0.0, "leadership": 0.0, "reliability": 0.0}
        for country in snapshot.countries
    }
    for company in snapshot.companies:
        row = by_company.get(company.id)
        entry = totals.get(company.country_id)
        if row is None or entry is None:
            continue
        entry["count"] += 1
        entry["output"] += row.output_score
        entry["talent"] += row.talent_score
        entry["leadership"] += row.leadership_score
        entry["reliability"] += row.reliability_score

    ordered = sorted(totals.items(), key=lambda item: (-item[1]["output"], item[0]))
    rows: List[CountryYearPerformance] = []
    for rank, (country_id, entry) in enumerate(ordered, start=1):
        count = int(entry["count"])
        rows.append(
            CountryYearPerformance(
                country_id=country_id,
                world_id=snapshot.world_id,
                year=year,
                num_companies=count,
                total_output=entry["output"],
                average_output=(entry["output"] / count) if count else None,
                talent_score=entry["talent"],
                leadership_score=entry["leadership"],
                reliability_score=entry["reliability"],
                rank=rank,
            )
        )
    return rows


# ============================================================================
# Read-side summaries
# ============================================================================


class OutputTotals(BaseModel):
    num_companies: int = 0
    total_output: float = 0.0
    average_output: Optional[float] = None


class IndustryOutput(OutputTotals):
    industry: str


class TopCompany(BaseModel):
    company_id: int
    name: str
    industry: str
    output_score: float


class CountryPerformanceSummary(BaseModel):
    country_id: int
    year: int
    overall: OutputTotals
    industries: List[IndustryOutput]
    top_companies: List[TopCompany]


class CountryStanding(BaseModel):
    country_id: int
    name: str
    rank: int
    overall: OutputTotals
    industries: List[IndustryOutput]


def _average(total: float, count: int) -> Optional[float]:
    return total / count if count else None


def country_performance_summary(
    snapshot: WorldSnapshot, country_id: int, year: int
) -> CountryPerformanceSummary:
    """Summarise a country's company output for one year.

    Companies without a row for ``year`` are skipped. The three core
    industries always appear (possibly empty); OTHER appears only when some
    company falls in it. Industries are sorted by total output descending then
    name; the top five companies by output descending then company id.
    """
    by_company = _rows_for_year(snapshot, year)

    buckets: Dict[str, List[float]] = {industry: [0, 0.0] for industry in CORE_INDUSTRIES}
    total_output = 0.0
    counted = 0
    candidates: List[TopCompany] = []

    for company in snapshot.companies:
        if company.country_id != country_id:
            continue
        row = by_company.get(company.id)
        if row is None:
            continue
        bucket = buckets.setdefault(bucket_industry(company.industry), [0, 0.0])
        bucket[0] += 1
        bucket[1] += row.output_score
        total_output += row.output_score
        counted += 1
        candidates.append(
            TopCompany(
                company_id=company.id,
                name=company.name,
                industry=company.industry,
                output_score=row.output_score,
            )
        )

    industries = [
        IndustryOutput(
            industry=industry,
            num_companies=int(count),
            total_output=output,
            average_output=_average(output, int(count)),
        )
        for industry, (count, output) in buckets.items()
    ]
    industries.sort(key=lambda entry: (-entry.total_output, entry.industry))

    candidates.sort(key=lambda entry: (-entry.output_score, entry.company_id))

    return CountryPerformanceSummary(
        country_id=country_id,
        year=year,
        overall=OutputTotals(
            num_companies=counted,
            total_output=total_output,
            average_output=_average(total_output, counted),
        ),
        industries=industries,
        top_companies=candidates[:TOP_COMPANY_LIMIT],
    )


def world_standings(snapshot: WorldSnapshot, year: Optional[int] = None) -> List[CountryStanding]:
    """League table of every country for ``year`` (default: the world's current year).

    Ordered by total output, then average output, then country name.
    """
    year = snapshot.world.current_year if year is None else year

    standings: List[CountryStanding] = []
    for country in snapshot.countries:
        summary = country_performance_summary(snapshot, country.id, year)
        standings.append(
            CountryStanding(
                country_id=country.id,
                name=country.name,
                rank=0,
                overall=summary.overall,
                industries=summary.industries,
            )
        )

    standings.sort(
        key=lambda s: (-s.overall.total_output, -(s.overall.average_output or 0.0), s.name)
    )
    for rank, standing in enumerate(standings, start=1):
        standing.rank = rank
    return standings
