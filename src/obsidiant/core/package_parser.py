"""Read the EPUB container and package document from archive entries."""

import logging
from urllib.parse import unquote

from bs4 import BeautifulSoup, Tag

from obsidiant.core.archive import PackageArchive
from obsidiant.core.errors import PackageStructureError
from obsidiant.models.package import ManifestItem, PackageMetadata, SpineEntry

log = logging.getLogger(__name__)

CONTAINER_PATH = "META-INF/container.xml"


def find_package_path(archive: PackageArchive) -> str:
    """Archive path of the package document named by ``container.xml``.

    Raises:
        PackageStructureError: If the container or its rootfile is missing
    """
    container = archive.get(CONTAINER_PATH)
    if container is None:
        raise PackageStructureError(f"Missing {CONTAINER_PATH}")

    soup = BeautifulSoup(container.data, "xml")
    rootfile = soup.find("rootfile")
    if rootfile is None or not rootfile.get("full-path"):
        raise PackageStructureError(f"No <rootfile> with a full-path in {CONTAINER_PATH}")
    return rootfile["full-path"]


def parse_package_metadata(archive: PackageArchive) -> PackageMetadata:
    """Extract metadata, manifest and spine from the package document.

    Manifest items are not required to exist in the archive; missing
    documents are reported when the spine is analyzed.

    Raises:
        PackageStructureError: If the container pointer or the package
            document cannot be located
    """
    opf_path = find_package_path(archive)
    package = archive.get(opf_path)
    if package is None:
        raise PackageStructureError(f"Package document not found: {opf_path}")
    log.info(f"Reading package document {opf_path}")

    soup = BeautifulSoup(package.data, "xml")

    manifest: dict[str, ManifestItem] = {}
    manifest_tag = soup.find("manifest")
    if manifest_tag is not None:
        for item in manifest_tag.find_all("item"):
            item_id, href = item.get("id"), item.get("href")
            if not item_id or not href:
                continue
            manifest[item_id] = ManifestItem(
                id=item_id,
                href=unquote(href),
                media_type=item.get("media-type", ""),
            )

    spine: list[SpineEntry] = []
    spine_tag = soup.find("spine")
    if spine_tag is not None:
        for itemref in spine_tag.find_all("itemref"):
            idref = itemref.get("idref")
            manifest_item = manifest.get(idref)
            if manifest_item is None:
                log.warning(f"Spine references unknown manifest id: {idref}")
                continue
            spine.append(SpineEntry(id=idref, href=manifest_item.href))

    log.info(f"Found {len(manifest)} manifest items, {len(spine)} spine entries")

    metadata_tag = soup.find("metadata")
    return PackageMetadata(
        title=_dc_value(metadata_tag, "title"),
        creator=_dc_value(metadata_tag, "creator"),
        language=_dc_value(metadata_tag, "language"),
        identifier=_dc_value(metadata_tag, "identifier"),
        spine=spine,
        manifest=manifest,
    )


def _dc_value(metadata: Tag | None, name: str) -> str | None:
    """First non-empty Dublin Core value, or None."""
    if metadata is None:
        return None
    element = metadata.find(f"dc:{name}") or metadata.find(name)
    if element is None:
        return None
    return element.get_text(strip=True) or None
