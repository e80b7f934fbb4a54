"""
Members command handler
Prints the members of a collection, one per line
"""
from typing import Any, Callable, Optional

from config import ReclaimConfig
from services.collection_service import CollectionMembershipService
from services.remote_session import SessionFactory, session_factory_for


class MembersHandler:
    """Handles the members command"""

    def __init__(
        self,
        reclaim_config: ReclaimConfig,
        session_factory: Optional[SessionFactory] = None,
        write: Callable[[str], None] = print
    ):
        settings = reclaim_config.get_settings()
        self.write = write
        self.membership_service = CollectionMembershipService(
            settings.site,
            session_factory or session_factory_for(settings.ssh)
        )

    def handle(self, args: Any) -> int:
        members = self.membership_service.list_members(
            args.collection,
            site_server=args.site_server,
            site_code=args.site_code
        )
        for member in members:
            self.write(f"{member.name}\t{member.resource_id}")
        return 0
