"""
Collection membership service
Queries the site provider for the members of a named collection
"""
import logging
from typing import List, Optional

from models.cache import CollectionMember, CollectionMembership
from models.settings import SiteSettings
from services import powershell
from services.errors import CollectionNotFoundError, ConfigError
from services.remote_session import SessionFactory

logger = logging.getLogger(__name__)


def membership_script(site_code: str, collection_name: str) -> str:
    """Script that resolves a collection by name and lists its members"""
    return powershell.build_script('collection-members', f"""
$namespace = 'root\\SMS\\site_' + {powershell.quote_literal(site_code.upper())}
$name = {powershell.quote_literal(collection_name)}
$wqlName = $name -replace '\\\\', '\\\\' -replace "'", "\\'"
$collection = Get-CimInstance -Namespace $namespace -ClassName SMS_Collection -Filter "Name='$wqlName'" |
    Select-Object -First 1
if (-not $collection) {{
    [pscustomobject]@{{ found = $false; collection_id = $null; members = @() }} | ConvertTo-Json -Compress
    return
}}
$members = @(Get-CimInstance -Namespace $namespace -ClassName SMS_FullCollectionMembership `
    -Filter "CollectionID='$($collection.CollectionID)'" |
    Sort-Object -Property Name |
    ForEach-Object {{ [pscustomobject]@{{ name = $_.Name; resource_id = $_.ResourceID }} }})
[pscustomobject]@{{ found = $true; collection_id = $collection.CollectionID; members = $members }} |
    ConvertTo-Json -Depth 3 -Compress
""")


class CollectionMembershipService:
    """Looks up collection members through a session to the site server"""

    def __init__(self, settings: SiteSettings, session_factory: SessionFactory):
        self.settings = settings
        self.session_factory = session_factory

    def list_members(
        self,
        collection_name: str,
        site_server: Optional[str] = None,
        site_code: Optional[str] = None
    ) -> List[CollectionMember]:
        server = site_server or self.settings.server
        code = site_code or self.settings.site_code
        if not server or not code:
            raise ConfigError("Collection lookups need a site server and a site code")

        with self.session_factory(server) as session:
            document = session.run_script(membership_script(code, collection_name))

        membership = powershell.parse_model(CollectionMembership, document, server, 'collection-members')
        if not membership.found:
            raise CollectionNotFoundError(f"Collection not found on site {code.upper()}: {collection_name}")

        logger.info(f"Collection {collection_name} ({membership.collection_id}) has {len(membership.members)} member(s)")
        return membership.members
