"""
Service Catalog.

Admin list of salon services (YClients "services").
"""

from beautyslot.backend.models.yclients import YClientsService
from beautyslot.backend.schemas.base import ListPage
from beautyslot.backend.schemas.catalog import ServiceResponse
from beautyslot.backend.services.base import BaseService

DEFAULT_SEANCE_SECONDS = 3600


def to_service_response(service: YClientsService) -> ServiceResponse:
    return ServiceResponse(
        id=service.id,
        title=service.title,
        category_id=service.category_id,
        price_min=service.price_min,
        price_max=service.price_max,
        duration=service.seance_length or DEFAULT_SEANCE_SECONDS,
        active=service.active == 1,
        image=service.image or None,
        comment=service.comment or None,
    )


class CatalogService(BaseService):
    """Filters and sorts synced services."""

    def list_services(
        self,
        search: str | None = None,
        category_id: int | None = None,
        active_only: bool = False,
    ) -> ListPage[ServiceResponse]:
        services = [to_service_response(s) for s in self.sync_store.services]

        if search:
            needle = search.lower()
            services = [s for s in services if needle in s.title.lower()]
        if category_id is not None:
            services = [s for s in services if s.category_id == category_id]
        if active_only:
            services = [s for s in services if s.active]

        services.sort(key=lambda s: s.title.casefold())
        return ListPage(items=services, total=len(services))
