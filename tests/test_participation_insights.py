from smartgestion.analyzer.participation_engine import generate_participation_insights
from smartgestion.models.aggregate_models import (
    AggregateBundle,
    FacultyParticipationPoint,
    HourlyParticipationPoint,
)
from smartgestion.models.analysis_models import Sentiment


def _by_code(bundle: AggregateBundle) -> dict:
    return {i.code: i for i in generate_participation_insights(bundle)}


def test_peak_hour_and_day_sum_across_buckets() -> None:
    bundle = AggregateBundle(
        hourly_participation=[
            HourlyParticipationPoint(hour=9, day_of_week=1, participation_count=5),
            HourlyParticipationPoint(hour=14, day_of_week=1, participation_count=3),
            HourlyParticipationPoint(hour=14, day_of_week=3, participation_count=4),
        ]
    )
    insights = _by_code(bundle)
    assert insights["peak_hour"].value == "14h"
    assert "14h (7 registrations)" in insights["peak_hour"].text
    assert insights["peak_day"].text == "Mon is the busiest day (8 registrations)"


def test_peak_hour_ties_go_to_the_earliest_hour() -> None:
    bundle = AggregateBundle(
        hourly_participation=[
            HourlyParticipationPoint.model_validate({"heure": 16, "jour_semaine": 5, "nb_participations": 4}),
            HourlyParticipationPoint.model_validate({"heure": 8, "jour_semaine": 2, "nb_participations": 4}),
        ]
    )
    insights = _by_code(bundle)
    assert insights["peak_hour"].value == "8h"
    assert insights["peak_day"].value == "Tue"


def test_faculty_dominance_at_ratio_threshold() -> None:
    bundle = AggregateBundle(
        faculty_participation=[
            FacultyParticipationPoint(faculty="Law", participation_count=20),
            FacultyParticipationPoint(faculty="Sciences", participation_count=30),
        ]
    )
    dominance = _by_code(bundle)["faculty_dominance"]
    assert dominance.text.startswith("Participants from Sciences")
    assert "1.5×" in dominance.text
    assert dominance.sentiment == Sentiment.INFO


def test_faculty_dominance_below_ratio_is_silent() -> None:
    bundle = AggregateBundle(
        faculty_participation=[
            FacultyParticipationPoint(faculty="Sciences", participation_count=29),
            FacultyParticipationPoint(faculty="Law", participation_count=20),
        ]
    )
    assert "faculty_dominance" not in _by_code(bundle)


def test_student_visitor_split() -> None:
    bundle = AggregateBundle(
        faculty_participation=[
            FacultyParticipationPoint(faculty="Sciences", student_count=50, visitor_count=10),
            FacultyParticipationPoint(faculty="Law", student_count=25, visitor_count=15),
        ]
    )
    split = _by_code(bundle)["student_ratio"]
    assert split.text == "Student / visitor split: 75% students, 25% visitors"


def test_empty_bundle_yields_no_participation_insights() -> None:
    assert generate_participation_insights(AggregateBundle()) == []
