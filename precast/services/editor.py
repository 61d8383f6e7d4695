"""
Admin product editor - holds the draft for one add/edit session and drives
uploads and saves through the uploader and product service.

States: closed -> creating | editing -> (uploading) -> saving -> closed.
Remote failures become notifications; they never leave the editor stuck in
uploading or saving.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from precast.schemas import ProductDraft, ProductRead
from precast.services.errors import EditorStateError, NotFoundError, StoreError, ValidationError
from precast.services.products import ProductService
from precast.services.uploads import ImageFile, ImageUploader

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "description", "base_price", "transport_cost", "is_available")


class EditorState(str, Enum):
    CLOSED = "closed"
    CREATING = "creating"
    EDITING = "editing"
    UPLOADING = "uploading"
    SAVING = "saving"


@dataclass
class Notification:
    title: str
    description: str = ""
    variant: str = "default"  # "default" or "destructive"


class AdminEditor:
    def __init__(self):
        self.state = EditorState.CLOSED
        self.draft: Optional[ProductDraft] = None
        self.uploading = False
        self.saving = False
        self.last_saved: Optional[ProductRead] = None
        self._notifications: List[Notification] = []
        # State to return to after an upload or a failed save
        self._resume_state: Optional[EditorState] = None
        # Bumped on every open/cancel so stale in-flight work is ignored
        self._session = 0

    # ─── Notifications ───

    def notify(self, title: str, description: str = "", variant: str = "default") -> None:
        self._notifications.append(Notification(title, description, variant))

    def drain_notifications(self) -> List[Notification]:
        pending, self._notifications = self._notifications, []
        return pending

    # ─── Session lifecycle ───

    def open_create(self) -> ProductDraft:
        self._require(EditorState.CLOSED)
        self._start_session(EditorState.CREATING, ProductDraft())
        logger.info("Editor opened for new product")
        return self.draft

    def open_edit(self, product: ProductRead) -> ProductDraft:
        self._require(EditorState.CLOSED)
        self._start_session(EditorState.EDITING, ProductDraft.from_product(product))
        logger.info(f"Editor opened for product {product.id}")
        return self.draft

    def cancel(self) -> None:
        """Discard the draft from any state; nothing is sent anywhere"""
        if self.state != EditorState.CLOSED:
            logger.info(f"Editor cancelled from {self.state.value}")
        self._close()

    # ─── Draft edits ───

    def update_draft(self, fields: Dict[str, Any]) -> ProductDraft:
        """Text fields stay editable while an upload is running"""
        self._require(EditorState.CREATING, EditorState.EDITING, EditorState.UPLOADING)
        changes = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS}
        self.draft = self.draft.model_copy(update=changes)
        return self.draft

    def remove_image(self, index: int) -> ProductDraft:
        """Drop one image URL from the draft. The stored object is not deleted."""
        self._require(EditorState.CREATING, EditorState.EDITING)
        images = list(self.draft.images or [])
        if index < 0 or index >= len(images):
            raise EditorStateError(f"No image at position {index}")
        del images[index]
        self.draft = self.draft.model_copy(update={"images": images})
        return self.draft

    async def upload_images(self, uploader: ImageUploader, files: Sequence[ImageFile]) -> List[str]:
        """Upload a batch and append the resulting URLs to the draft"""
        self._require(EditorState.CREATING, EditorState.EDITING)
        if not files:
            return []

        session = self._session
        self._resume_state = self.state
        self.state = EditorState.UPLOADING
        self.uploading = True

        try:
            result = await uploader.upload_batch(files)
        finally:
            if session == self._session:
                self.uploading = False
                self.state = self._resume_state

        if session != self._session:
            logger.info(f"Discarding {len(result.urls)} uploaded URLs from a cancelled session")
            return []

        for failure in result.failures:
            self.notify("Upload failed", f"{failure.filename}: {failure.message}", "destructive")

        if result.urls:
            images = list(self.draft.images or []) + result.urls
            self.draft = self.draft.model_copy(update={"images": images})
        return result.urls

    # ─── Save ───

    async def save(self, products: ProductService) -> Optional[ProductRead]:
        """
        Submit the draft. Returns the stored product on success, None when the
        save was refused or failed (the draft is kept so the admin can retry).
        """
        self._require(EditorState.CREATING, EditorState.EDITING)

        if not (self.draft.name or "").strip():
            self.notify("Product name is required", "Enter a name before saving.", "destructive")
            return None

        session = self._session
        self._resume_state = self.state
        self.state = EditorState.SAVING
        self.saving = True
        saved: Optional[ProductRead] = None

        try:
            fields = self.draft.to_fields()
            if self.draft.id:
                saved = await products.update(self.draft.id, fields)
            else:
                saved = await products.create(fields)
        except ValidationError as e:
            self.notify("Invalid product", e.message, "destructive")
        except NotFoundError as e:
            self.notify("Product no longer exists", e.message, "destructive")
        except StoreError as e:
            self.notify("Save failed", e.message, "destructive")
        finally:
            if session == self._session:
                self.saving = False
                self.state = self._resume_state

        if saved is None or session != self._session:
            return saved

        self.notify("Product saved", saved.name)
        self.last_saved = saved
        self._close()
        return saved

    # ─── Internals ───

    def _require(self, *states: EditorState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise EditorStateError(f"Editor is {self.state.value}; expected {allowed}")

    def _start_session(self, state: EditorState, draft: ProductDraft) -> None:
        self._session += 1
        self.state = state
        self.draft = draft
        self.last_saved = None
        self._resume_state = None

    def _close(self) -> None:
        self._session += 1
        self.state = EditorState.CLOSED
        self.draft = None
        self.uploading = False
        self.saving = False
        self._resume_state = None


admin_editor = AdminEditor()


def get_editor() -> AdminEditor:
    """Dependency returning the single admin editor session"""
    return admin_editor
