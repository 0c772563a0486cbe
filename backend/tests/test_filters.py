from datetime import datetime, timezone

from models.entities import SalaryRange
from models.requests import RecommendationFilters, SalaryFilter
from services.filters import company_excluded, is_remote, job_matches_filters, order_by_recency


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class TestRemote:
    def test_remote_by_location_or_type(self, make_job):
        assert is_remote(make_job(location="Remote (US)"))
        assert is_remote(make_job(location="Anywhere"))
        assert is_remote(make_job(location="Austin", job_type="REMOTE"))
        assert not is_remote(make_job(location="Austin", job_type="FULL_TIME"))

    def test_remote_only_without_location_keeps_only_remote(self, make_job):
        filters = RecommendationFilters(remote_only=True)
        assert job_matches_filters(make_job(location="Remote"), filters)
        assert not job_matches_filters(make_job(location="Austin"), filters)

    def test_remote_only_extends_location(self, make_job):
        filters = RecommendationFilters(location="berlin", remote_only=True)
        assert job_matches_filters(make_job(location="Berlin, Germany"), filters)
        assert job_matches_filters(make_job(location="Remote"), filters)
        assert not job_matches_filters(make_job(location="Austin"), filters)

    def test_location_alone_is_substring(self, make_job):
        filters = RecommendationFilters(location="Berlin")
        assert job_matches_filters(make_job(location="Berlin, Germany"), filters)
        assert not job_matches_filters(make_job(location="Remote"), filters)


class TestFieldFilters:
    def test_no_filters_pass_everything(self, make_job):
        assert job_matches_filters(make_job(), None)
        assert job_matches_filters(make_job(), RecommendationFilters())

    def test_job_types(self, make_job):
        filters = RecommendationFilters(job_types=["full_time", "CONTRACT"])
        assert job_matches_filters(make_job(job_type="FULL_TIME"), filters)
        assert not job_matches_filters(make_job(job_type="PART_TIME"), filters)

    def test_salary_overlap(self, make_job):
        filters = RecommendationFilters(salary=SalaryFilter(min=90000, max=120000))
        assert job_matches_filters(make_job(salary=SalaryRange(min=100000, max=150000)), filters)
        assert not job_matches_filters(make_job(salary=SalaryRange(min=130000, max=150000)), filters)
        assert not job_matches_filters(make_job(salary=SalaryRange(min=50000, max=80000)), filters)

    def test_salary_filter_excludes_unlisted(self, make_job):
        filters = RecommendationFilters(salary=SalaryFilter(min=90000))
        assert not job_matches_filters(make_job(salary=None), filters)

    def test_skills_fuzzy(self, make_job):
        filters = RecommendationFilters(skills=["javascrip"])
        assert job_matches_filters(make_job(requirements=("JavaScript",)), filters)
        assert not job_matches_filters(make_job(requirements=("SQL",)), filters)

    def test_company_and_industry(self, make_job):
        filters = RecommendationFilters(companies=["globex"], industries=["Technology"])
        assert job_matches_filters(make_job(company="Globex", industry="technology"), filters)
        assert not job_matches_filters(make_job(company="Initech", industry="technology"), filters)
        assert not job_matches_filters(make_job(company="Globex", industry="finance"), filters)

    def test_deadline(self, make_job):
        filters = RecommendationFilters(deadline=_utc(2025, 7, 1))
        assert job_matches_filters(make_job(application_deadline=_utc(2025, 8, 1)), filters)
        assert not job_matches_filters(make_job(application_deadline=_utc(2025, 6, 15)), filters)
        assert job_matches_filters(make_job(application_deadline=None), filters)

    def test_benefits_any_overlap(self, make_job):
        filters = RecommendationFilters(benefits=["Health insurance", "401k"])
        assert job_matches_filters(make_job(benefits=["401K", "Gym"]), filters)
        assert not job_matches_filters(make_job(benefits=["Gym"]), filters)

    def test_filters_are_and_combined(self, make_job):
        filters = RecommendationFilters(job_types=["FULL_TIME"], industries=["finance"])
        assert not job_matches_filters(make_job(job_type="FULL_TIME", industry="technology"), filters)


def test_order_by_recency(make_job):
    jobs = [
        make_job("old", created_at=_utc(2025, 1, 1)),
        make_job("new_late", created_at=_utc(2025, 5, 1), application_deadline=_utc(2025, 9, 1)),
        make_job("new_soon", created_at=_utc(2025, 5, 1), application_deadline=_utc(2025, 7, 1)),
    ]
    assert [j.id for j in order_by_recency(jobs)] == ["new_soon", "new_late", "old"]


def test_company_excluded_is_case_insensitive(make_job):
    assert company_excluded(make_job(company="Globex"), [" globex"])
    assert not company_excluded(make_job(company="Initech"), ["Globex"])
    assert not company_excluded(make_job(company="Globex"), [])
