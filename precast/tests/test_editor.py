"""
Admin editor tests - state transitions, draft handling and error notifications
"""
import asyncio

import pytest
from unittest.mock import AsyncMock

from precast.schemas import ProductDraft, ProductRead
from precast.services.editor import EditorState
from precast.services.errors import EditorStateError, NotFoundError, StoreError
from precast.services.products import ProductService
from precast.services.uploads import ImageFile, UploadBatchResult, UploadFailure

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def _product(**overrides) -> ProductRead:
    data = {
        "id": "p-1",
        "name": "Culvert Pipe 600mm",
        "description": "Reinforced",
        "base_price": 4500,
        "transport_cost": 800,
        "images": ["http://cdn.test/a.jpg", "http://cdn.test/b.jpg", "http://cdn.test/c.jpg"],
        "is_available": True,
    }
    data.update(overrides)
    return ProductRead(**data)


def _mock_products() -> AsyncMock:
    return AsyncMock(spec=ProductService)


# ===================== OPEN / CANCEL =====================


class TestLifecycle:

    def test_starts_closed(self, editor):
        assert editor.state == EditorState.CLOSED
        assert editor.draft is None

    def test_open_create_has_empty_draft(self, editor):
        draft = editor.open_create()
        assert editor.state == EditorState.CREATING
        assert draft.id is None
        assert draft.name is None

    def test_open_edit_seeds_draft(self, editor):
        draft = editor.open_edit(_product())
        assert editor.state == EditorState.EDITING
        assert draft.id == "p-1"
        assert draft.base_price == 4500
        assert len(draft.images) == 3

    def test_cannot_open_twice(self, editor):
        editor.open_create()
        with pytest.raises(EditorStateError):
            editor.open_edit(_product())

    def test_cancel_discards_draft(self, editor):
        editor.open_edit(_product())
        editor.update_draft({"name": "Changed"})
        editor.cancel()
        assert editor.state == EditorState.CLOSED
        assert editor.draft is None

    def test_edit_requires_open_session(self, editor):
        with pytest.raises(EditorStateError):
            editor.update_draft({"name": "X"})


# ===================== DRAFT =====================


class TestDraft:

    def test_update_draft_ignores_unknown_fields(self, editor):
        editor.open_create()
        draft = editor.update_draft({"name": "Road Kerb", "id": "forged", "images": ["x"]})
        assert draft.name == "Road Kerb"
        assert draft.id is None
        assert draft.images is None

    @pytest.mark.parametrize("index", [0, 1, 2])
    def test_remove_image_keeps_order(self, editor, index):
        editor.open_edit(_product())
        original = list(editor.draft.images)

        draft = editor.remove_image(index)

        expected = original[:index] + original[index + 1:]
        assert draft.images == expected
        assert len(draft.images) == len(original) - 1

    def test_remove_image_out_of_range(self, editor):
        editor.open_edit(_product(images=["http://cdn.test/a.jpg"]))
        with pytest.raises(EditorStateError):
            editor.remove_image(1)
        with pytest.raises(EditorStateError):
            editor.remove_image(-1)
        assert editor.draft.images == ["http://cdn.test/a.jpg"]

    def test_to_fields_applies_submit_defaults(self):
        fields = ProductDraft(name="Slab", description="").to_fields()
        assert fields["description"] is None
        assert fields["images"] == []
        assert fields["is_available"] is True


# ===================== UPLOAD =====================


class TestUpload:

    async def test_urls_appended_and_failures_notified(self, editor):
        editor.open_edit(_product(images=["http://cdn.test/a.jpg"]))
        uploader = AsyncMock()
        uploader.upload_batch.return_value = UploadBatchResult(
            urls=["http://cdn.test/new1.png", "http://cdn.test/new2.png"],
            failures=[UploadFailure("bad.png", "Bucket not found")],
        )
        files = [ImageFile(n, PNG_BYTES, "image/png") for n in ("new1.png", "bad.png", "new2.png")]

        urls = await editor.upload_images(uploader, files)

        assert len(urls) == 2
        assert editor.draft.images == [
            "http://cdn.test/a.jpg", "http://cdn.test/new1.png", "http://cdn.test/new2.png",
        ]
        notes = editor.drain_notifications()
        assert len(notes) == 1
        assert notes[0].variant == "destructive"
        assert "bad.png" in notes[0].description
        # Form is usable again
        assert editor.state == EditorState.EDITING
        assert editor.uploading is False

    async def test_real_uploader_partial_failure(self, editor, uploader):
        editor.open_create()
        files = [
            ImageFile("a.png", PNG_BYTES, "image/png"),
            ImageFile("b.txt", b"text", "text/plain"),
            ImageFile("c.png", PNG_BYTES, "image/png"),
        ]
        urls = await editor.upload_images(uploader, files)

        assert len(urls) == 2
        assert editor.draft.images == urls
        assert len(editor.drain_notifications()) == 1
        assert editor.state == EditorState.CREATING

    async def test_fields_editable_while_uploading(self, editor):
        editor.open_create()
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_batch(files):
            started.set()
            await release.wait()
            return UploadBatchResult(urls=["http://cdn.test/x.png"])

        uploader = AsyncMock()
        uploader.upload_batch.side_effect = slow_batch

        task = asyncio.create_task(editor.upload_images(uploader, [ImageFile("x.png", PNG_BYTES, "image/png")]))
        await started.wait()

        assert editor.state == EditorState.UPLOADING
        assert editor.uploading is True
        editor.update_draft({"name": "Typed During Upload"})
        with pytest.raises(EditorStateError):
            await editor.upload_images(uploader, [ImageFile("y.png", PNG_BYTES, "image/png")])

        release.set()
        await task

        assert editor.state == EditorState.CREATING
        assert editor.draft.name == "Typed During Upload"
        assert editor.draft.images == ["http://cdn.test/x.png"]

    async def test_cancel_during_upload_discards_urls(self, editor):
        editor.open_create()
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_batch(files):
            started.set()
            await release.wait()
            return UploadBatchResult(urls=["http://cdn.test/x.png"])

        uploader = AsyncMock()
        uploader.upload_batch.side_effect = slow_batch

        task = asyncio.create_task(editor.upload_images(uploader, [ImageFile("x.png", PNG_BYTES, "image/png")]))
        await started.wait()
        editor.cancel()
        editor.open_create()

        release.set()
        assert await task == []
        assert editor.state == EditorState.CREATING
        assert editor.draft.images is None

    async def test_unexpected_error_clears_uploading(self, editor):
        editor.open_create()
        uploader = AsyncMock()
        uploader.upload_batch.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await editor.upload_images(uploader, [ImageFile("x.png", PNG_BYTES, "image/png")])
        assert editor.uploading is False
        assert editor.state == EditorState.CREATING


# ===================== SAVE =====================


class TestSave:

    async def test_empty_name_makes_no_call(self, editor):
        editor.open_create()
        editor.update_draft({"name": "  ", "base_price": 100})
        before = editor.draft.model_copy(deep=True)
        products = _mock_products()

        assert await editor.save(products) is None

        products.create.assert_not_awaited()
        products.update.assert_not_awaited()
        assert editor.draft == before
        assert editor.state == EditorState.CREATING
        assert editor.drain_notifications()[0].title == "Product name is required"

    async def test_create_closes_editor(self, editor):
        editor.open_create()
        editor.update_draft({"name": "Road Kerb", "base_price": "650"})
        saved = _product(id="new-id", name="Road Kerb", images=[])
        products = _mock_products()
        products.create.return_value = saved

        assert await editor.save(products) == saved

        fields = products.create.await_args.args[0]
        assert fields["name"] == "Road Kerb"
        assert fields["is_available"] is True
        assert fields["images"] == []
        assert editor.state == EditorState.CLOSED
        assert editor.draft is None
        assert editor.saving is False
        assert editor.last_saved == saved

    async def test_edit_calls_update_with_id(self, editor):
        editor.open_edit(_product())
        editor.update_draft({"is_available": False})
        products = _mock_products()
        products.update.return_value = _product(is_available=False)

        await editor.save(products)

        product_id, fields = products.update.await_args.args
        assert product_id == "p-1"
        assert fields["is_available"] is False
        assert fields["base_price"] == 4500
        assert editor.state == EditorState.CLOSED

    @pytest.mark.parametrize("error", [StoreError("Could not save product"), NotFoundError("p-1")])
    async def test_remote_failure_keeps_draft(self, editor, error):
        editor.open_edit(_product())
        editor.update_draft({"name": "Renamed"})
        products = _mock_products()
        products.update.side_effect = error

        assert await editor.save(products) is None

        assert editor.state == EditorState.EDITING
        assert editor.saving is False
        assert editor.draft.name == "Renamed"
        notes = editor.drain_notifications()
        assert len(notes) == 1
        assert notes[0].variant == "destructive"

    async def test_save_against_real_store(self, editor, db_session, catalog):
        editor.open_create()
        editor.update_draft({"name": "Culvert Pipe 600mm", "base_price": 4500, "transport_cost": 800})

        saved = await editor.save(ProductService(db_session, catalog))

        assert saved.id
        assert [p.id for p in catalog.snapshot.products] == [saved.id]
        assert editor.state == EditorState.CLOSED

    async def test_negative_price_reported_not_raised(self, editor, db_session, catalog):
        editor.open_create()
        editor.update_draft({"name": "Slab", "base_price": -5})

        assert await editor.save(ProductService(db_session, catalog)) is None
        assert editor.state == EditorState.CREATING
        assert editor.drain_notifications()[0].title == "Invalid product"

    async def test_huge_price_saved_as_zero(self, editor, db_session, catalog):
        editor.open_create()
        editor.update_draft({"name": "Slab", "base_price": 10**400})

        saved = await editor.save(ProductService(db_session, catalog))

        assert saved.base_price == 0
        assert editor.state == EditorState.CLOSED
