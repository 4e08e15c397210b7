"""
Admission query selector (``admissions_modules.admission.selector``).

Responsibility
--------------
Read-only admission queries: filtered, paginated listing and the
status / class statistics.  Both derive from the ``admissions`` table at
query time; nothing is cached or stored.

Invariants enforced
-------------------
* ``by_status`` always carries every ``AdmissionStatus`` key.
* ``sum(by_status.values()) == total == sum(by_class.values())``.
* Listing order is newest inquiry first (``inquiry_date`` then
  ``temporary_id``, both descending) so paging is stable.
"""

from sqlalchemy import Select, func, or_, select

from admissions_kernel.selectors.base import BaseSelector
from admissions_modules.admission.models import (
    Admission,
    AdmissionFilter,
    AdmissionStatistics,
    AdmissionStatus,
)
from admissions_modules.admission.orm import AdmissionModel


class AdmissionSelector(BaseSelector[AdmissionModel]):
    """
    Selector for admission listings and statistics.

    Contract:
        Accepts an ``AdmissionFilter`` and applies exact matches on status,
        applying-for class and academic year, plus a case-insensitive
        substring search over English first and last names.

    Non-goals:
        - Validating or clamping pagination; the service does that.
    """

    model = AdmissionModel

    def _apply_filter(self, stmt: Select, filters: AdmissionFilter | None) -> Select:
        if filters is None:
            return stmt
        if filters.status is not None:
            stmt = stmt.where(AdmissionModel.status == filters.status.value)
        if filters.applying_for_class is not None:
            stmt = stmt.where(AdmissionModel.applying_for_class == filters.applying_for_class)
        if filters.academic_year_id is not None:
            stmt = stmt.where(AdmissionModel.academic_year_id == filters.academic_year_id)
        if filters.search is not None and filters.search.strip():
            term = filters.search.strip()
            stmt = stmt.where(
                or_(
                    AdmissionModel.first_name_en.icontains(term, autoescape=True),
                    AdmissionModel.last_name_en.icontains(term, autoescape=True),
                )
            )
        return stmt

    def find(
        self,
        filters: AdmissionFilter | None,
        limit: int,
        offset: int,
    ) -> tuple[tuple[Admission, ...], int]:
        """One page of matching admissions plus the unpaginated match count."""
        matching = self._apply_filter(select(AdmissionModel), filters)
        page = (
            matching.order_by(AdmissionModel.inquiry_date.desc(), AdmissionModel.temporary_id.desc())
            .limit(limit)
            .offset(offset)
        )
        return self._fetch_dtos(page), self._count(matching)

    def statistics(self, filters: AdmissionFilter | None = None) -> AdmissionStatistics:
        """Totals by status and by applying-for class."""
        by_status = {status: 0 for status in AdmissionStatus}
        status_stmt = self._apply_filter(
            select(AdmissionModel.status, func.count()).group_by(AdmissionModel.status),
            filters,
        )
        for status_value, count in self.session.execute(status_stmt):
            by_status[AdmissionStatus(status_value)] = count

        class_stmt = self._apply_filter(
            select(AdmissionModel.applying_for_class, func.count())
            .group_by(AdmissionModel.applying_for_class)
            .order_by(AdmissionModel.applying_for_class),
            filters,
        )
        by_class = {
            int(class_number): count
            for class_number, count in self.session.execute(class_stmt)
            if count
        }

        return AdmissionStatistics(
            total=sum(by_status.values()),
            by_status=by_status,
            by_class=by_class,
        )
