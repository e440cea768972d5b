import pytest
from unittest.mock import AsyncMock, MagicMock

from fastapi.responses import Response

from portal.core.exceptions import NotFound, StorageFileNotFound
from portal.core.storage import LocalPublicDisk, PublicDisk, SupabasePublicDisk
from portal.models.attachment import Attachment
from portal.models.enums import AttachableType
from portal.services.attachment_service import download, show


def make_attachment(**fields) -> Attachment:
    fields.setdefault("attachable_type", AttachableType.Post)
    fields.setdefault("attachable_id", 1)
    return Attachment(id=10, **fields)


def fake_disk(*existing: str) -> AsyncMock:
    disk = AsyncMock(spec=PublicDisk)
    disk.exists.side_effect = lambda path: path in existing
    disk.download.return_value = Response(content=b"file", media_type="application/pdf")
    return disk


# ------------------------------------------------------------------
# show
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_show_prefers_external_url_and_never_touches_storage():
    disk = fake_disk("docs/a.pdf")
    att = make_attachment(external_url="https://example.org/page", file_url="docs/a.pdf")

    res = await show(att, disk)

    assert res.status_code == 302
    assert res.headers["location"] == "https://example.org/page"
    disk.exists.assert_not_called()
    disk.download.assert_not_called()


@pytest.mark.asyncio
async def test_show_without_external_url_downloads():
    disk = fake_disk("docs/a.pdf")
    res = await show(make_attachment(file_url="docs/a.pdf"), disk)

    assert res.status_code == 200
    disk.download.assert_awaited_once()


# ------------------------------------------------------------------
# download
# ------------------------------------------------------------------
@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["https://example.com/f.pdf", "HTTP://Example.com/f.pdf"])
async def test_absolute_file_url_redirects_without_storage_check(url):
    disk = fake_disk()
    res = await download(make_attachment(file_url=url), disk)

    assert res.status_code == 302
    assert res.headers["location"] == url
    disk.exists.assert_not_called()


@pytest.mark.asyncio
async def test_empty_file_url_falls_back_to_external_url():
    res = await download(make_attachment(file_url="/", external_url="https://example.org/x"), fake_disk())
    assert res.status_code == 302
    assert res.headers["location"] == "https://example.org/x"


@pytest.mark.asyncio
async def test_empty_file_url_without_external_url_is_not_found():
    with pytest.raises(NotFound):
        await download(make_attachment(file_url=None), fake_disk())


@pytest.mark.asyncio
async def test_storage_prefix_is_stripped():
    disk = fake_disk("uploads/report.pdf")
    await download(make_attachment(file_url="/storage/uploads/report.pdf", title="Report"), disk)

    disk.download.assert_awaited_once_with("uploads/report.pdf", filename="Report", media_type=None)


@pytest.mark.asyncio
async def test_filename_falls_back_to_basename_and_mime_is_forwarded():
    disk = fake_disk("uploads/report.pdf")
    await download(make_attachment(file_url="uploads/report.pdf", mime_type="application/pdf"), disk)

    disk.download.assert_awaited_once_with(
        "uploads/report.pdf", filename="report.pdf", media_type="application/pdf"
    )


@pytest.mark.asyncio
async def test_legacy_path_is_served_from_legacy_tree():
    disk = fake_disk("legacy/legacy/report.pdf")
    res = await download(make_attachment(file_url="legacy/report.pdf"), disk)

    assert res.status_code == 200
    disk.download.assert_awaited_once_with(
        "legacy/legacy/report.pdf", filename="report.pdf", media_type=None
    )


@pytest.mark.asyncio
async def test_non_legacy_path_gets_no_legacy_lookup():
    disk = fake_disk("legacy/old/report.pdf")
    res = await download(make_attachment(file_url="old/report.pdf"), disk)

    assert res.status_code == 302
    assert res.headers["location"] == "/old/report.pdf"
    disk.exists.assert_awaited_once_with("old/report.pdf")


@pytest.mark.asyncio
async def test_unresolvable_path_redirects_to_raw_value():
    disk = fake_disk()
    res = await download(make_attachment(file_url="storage/missing/file.docx"), disk)

    assert res.status_code == 302
    assert res.headers["location"] == "/storage/missing/file.docx"
    disk.download.assert_not_called()


@pytest.mark.asyncio
async def test_file_vanishing_during_serve_is_not_found():
    disk = fake_disk("uploads/gone.pdf")
    disk.download.side_effect = StorageFileNotFound("uploads/gone.pdf")

    with pytest.raises(NotFound):
        await download(make_attachment(file_url="uploads/gone.pdf"), disk)


@pytest.mark.asyncio
async def test_resolution_does_not_modify_the_record():
    att = make_attachment(file_url="/storage/legacy/a.pdf", title="A")
    before = att.model_dump()
    await download(att, fake_disk("legacy/legacy/a.pdf"))
    assert att.model_dump() == before


# ------------------------------------------------------------------
# Local disk
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_local_disk_serves_file_as_attachment(tmp_path):
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "syllabus.pdf").write_bytes(b"%PDF-1.4")
    disk = LocalPublicDisk(str(tmp_path))

    assert await disk.exists("docs/syllabus.pdf")
    res = await disk.download("docs/syllabus.pdf", filename="Syllabus.pdf", media_type="application/pdf")

    assert res.media_type == "application/pdf"
    assert res.headers["content-disposition"].startswith("attachment")
    assert "Syllabus.pdf" in res.headers["content-disposition"]


@pytest.mark.asyncio
async def test_local_disk_refuses_paths_outside_root(tmp_path):
    root = tmp_path / "public"
    root.mkdir()
    (tmp_path / "secret.txt").write_text("nope")
    disk = LocalPublicDisk(str(root))

    assert not await disk.exists("../secret.txt")
    with pytest.raises(StorageFileNotFound):
        await disk.download("../secret.txt", filename="secret.txt")


@pytest.mark.asyncio
async def test_local_disk_missing_file_raises(tmp_path):
    disk = LocalPublicDisk(str(tmp_path))
    assert not await disk.exists("nothing.pdf")
    with pytest.raises(StorageFileNotFound):
        await disk.download("nothing.pdf", filename="nothing.pdf")


@pytest.mark.asyncio
async def test_local_disk_follows_symlinked_legacy_tree(tmp_path):
    old_site = tmp_path / "old_site_files"
    old_site.mkdir()
    (old_site / "report.pdf").write_bytes(b"%PDF-1.3 old")
    root = tmp_path / "public"
    root.mkdir()
    (root / "legacy").symlink_to(old_site, target_is_directory=True)
    disk = LocalPublicDisk(str(root))

    assert await disk.exists("legacy/report.pdf")

    res = await download(make_attachment(file_url="/storage/legacy/report.pdf"), disk)
    assert res.status_code == 200
    assert res.path.endswith("report.pdf")


@pytest.mark.asyncio
async def test_local_disk_refuses_dot_dot_segments_inside_path(tmp_path):
    root = tmp_path / "public"
    root.mkdir()
    (tmp_path / "secret.txt").write_text("nope")
    disk = LocalPublicDisk(str(root))

    assert not await disk.exists("legacy/../../secret.txt")


# ------------------------------------------------------------------
# Supabase disk
# ------------------------------------------------------------------
def supabase_client(**bucket_methods) -> MagicMock:
    client = MagicMock()
    bucket = client.storage.from_.return_value
    for name, behaviour in bucket_methods.items():
        setattr(bucket, name, behaviour)
    return client


@pytest.mark.asyncio
async def test_supabase_lookup_failure_is_not_found():
    client = supabase_client(list=MagicMock(side_effect=ConnectionError("bucket unreachable")))
    disk = SupabasePublicDisk(client, "public")

    with pytest.raises(NotFound):
        await download(make_attachment(file_url="docs/a.pdf"), disk)

    client.storage.from_.return_value.download.assert_not_called()


@pytest.mark.asyncio
async def test_supabase_serves_listed_file():
    client = supabase_client(
        list=MagicMock(return_value=[{"name": "a.pdf"}]),
        download=MagicMock(return_value=b"%PDF"),
    )
    disk = SupabasePublicDisk(client, "public")

    res = await download(make_attachment(file_url="docs/a.pdf", title="A.pdf"), disk)

    assert res.status_code == 200
    assert res.body == b"%PDF"
    assert res.headers["content-disposition"] == 'attachment; filename="A.pdf"'
    client.storage.from_.return_value.list.assert_called_once_with("docs", {"search": "a.pdf"})


@pytest.mark.asyncio
async def test_supabase_missing_file_keeps_redirect_fallback():
    client = supabase_client(list=MagicMock(return_value=[]))
    res = await download(make_attachment(file_url="docs/a.pdf"), SupabasePublicDisk(client, "public"))

    assert res.status_code == 302
    assert res.headers["location"] == "/docs/a.pdf"
