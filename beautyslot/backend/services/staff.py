"""
Staff Service.

Admin view of synced staff. Activity can be overridden locally without
touching YClients.
"""

from collections import Counter
from typing import Any

from beautyslot.backend.core.exceptions import NotFoundError, ValidationError
from beautyslot.backend.core.utils import local_now, record_day
from beautyslot.backend.models.yclients import YClientsStaff
from beautyslot.backend.schemas.base import ListPage
from beautyslot.backend.schemas.staff import StaffResponse, StaffTodayStats
from beautyslot.backend.services.base import BaseService


class StaffService(BaseService):
    """Lists staff, toggles activity and reports today's load."""

    def _today_counts(self) -> Counter:
        today = local_now().date().isoformat()
        return Counter(
            r.staff_id
            for r in self.sync_store.records
            if record_day(r.date) == today and not r.deleted and r.attendance != -1
        )

    def _is_active(self, staff: YClientsStaff) -> bool:
        override = self.sync_store.get_staff_active_override(staff.id)
        if override is not None:
            return override
        return staff.status == 1 and not staff.fired and not staff.hidden

    def _to_response(self, staff: YClientsStaff, appointments_today: int) -> StaffResponse:
        return StaffResponse(
            id=staff.id,
            yclients_id=str(staff.id),
            name=staff.name or "Без имени",
            specialization=staff.specialization or None,
            position=staff.position.title if staff.position and staff.position.title else None,
            photo_url=staff.avatar_big or staff.avatar or None,
            is_active=self._is_active(staff),
            fired=bool(staff.fired),
            appointments_today=appointments_today,
            rating=staff.rating or None,
        )

    def list_staff(
        self,
        include_fired: bool = False,
        search: str | None = None,
        role: str | None = None,
        is_active: bool | None = None,
    ) -> ListPage[StaffResponse]:
        """
        List staff sorted by today's appointment count, busiest first.

        Args:
            include_fired: Include fired staff
            search: Substring of name or specialization
            role: Substring of specialization or position title
            is_active: Filter by effective activity (override or YClients status)
        """
        counts = self._today_counts()
        staff = [
            s for s in self.sync_store.staff
            if include_fired or not s.fired
        ]
        items = [self._to_response(s, counts.get(s.id, 0)) for s in staff]

        if search:
            needle = search.lower()
            items = [
                s for s in items
                if needle in s.name.lower()
                or (s.specialization and needle in s.specialization.lower())
            ]
        if role and role != "null":
            needle = role.lower()
            items = [
                s for s in items
                if (s.specialization and needle in s.specialization.lower())
                or (s.position and needle in s.position.lower())
            ]
        if is_active is not None:
            items = [s for s in items if s.is_active == is_active]

        items.sort(key=lambda s: s.appointments_today, reverse=True)
        return ListPage(items=items, total=len(items))

    def toggle_active(self, staff_id: int, is_active: Any) -> StaffResponse:
        """
        Store an activity override for a staff member.

        Raises:
            ValidationError: If is_active is not a boolean
            NotFoundError: If no synced staff member has this id
        """
        if not isinstance(is_active, bool):
            raise ValidationError("is_active must be a boolean")

        staff = self.sync_store.find_staff(staff_id)
        if staff is None:
            raise NotFoundError("Staff member not found")

        self.sync_store.set_staff_active_override(staff_id, is_active)
        self._log_operation("Staff activity overridden", staff_id=staff_id, is_active=is_active)
        return self._to_response(staff, self._today_counts().get(staff_id, 0))

    def today_stats(self) -> StaffTodayStats:
        today = local_now().date().isoformat()
        today_records = [
            r for r in self.sync_store.records
            if record_day(r.date) == today and not r.deleted
        ]
        return StaffTodayStats(
            total=len(self.sync_store.staff),
            active_today=len({r.staff_id for r in today_records}),
            appointments_today=len(today_records),
        )
