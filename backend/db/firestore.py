"""Firestore service for assistant persistence.

Stores assistants with knowledge items as a subcollection:
- `assistants/{assistant_id}` - configuration plus `owner_id`
- `assistants/{assistant_id}/knowledge/{item_id}` - knowledge base items,
  replaced wholesale (delete all, then insert) on every save
"""

import json
import logging
import os
from datetime import UTC, datetime
from typing import Any

import firebase_admin
from firebase_admin import credentials, firestore
from google.cloud.firestore_v1 import AsyncClient
from google.oauth2 import service_account

from config import get_settings
from services.types import AssistantConfig, Credentials, KnowledgeItem

logger = logging.getLogger(__name__)

ASSISTANTS = "assistants"
KNOWLEDGE = "knowledge"
BATCH_LIMIT = 500


class AssistantNotFoundError(Exception):
    """Raised when an assistant does not exist or belongs to another user."""


def _load_firebase_credentials(creds_value: str) -> dict:
    """Load Firebase credentials from JSON string, file path, or base64."""
    import base64

    if os.path.isfile(creds_value):
        with open(creds_value) as f:
            return json.load(f)

    try:
        return json.loads(creds_value)
    except json.JSONDecodeError:
        pass

    try:
        decoded = base64.b64decode(creds_value).decode("utf-8")
        return json.loads(decoded)
    except Exception:
        pass

    raise ValueError("FIREBASE_CREDENTIALS is not valid JSON, file path, or base64")


def assistant_to_document(config: AssistantConfig, owner_id: str) -> dict[str, Any]:
    """Flatten a configuration into Firestore fields (knowledge excluded)."""
    return {
        "owner_id": owner_id,
        "name": config.name,
        "instructions": config.instructions,
        "provider": config.provider,
        "model_version": config.model_version,
        "api_key": config.credentials.api_key,
        "organization_id": config.credentials.organization_id,
        "max_tokens": config.max_tokens,
        "temperature": config.temperature,
        "welcome_message": config.welcome_message,
    }


def document_to_assistant(
    assistant_id: str,
    data: dict[str, Any],
    knowledge: list[KnowledgeItem] | None = None,
) -> AssistantConfig:
    """Rebuild a configuration from Firestore fields."""
    return AssistantConfig(
        id=assistant_id,
        name=data.get("name", ""),
        instructions=data.get("instructions", ""),
        provider=data.get("provider", ""),
        model_version=data.get("model_version", ""),
        credentials=Credentials(
            api_key=data.get("api_key") or "",
            organization_id=data.get("organization_id") or None,
        ),
        max_tokens=data.get("max_tokens") or 1024,
        temperature=data.get("temperature", 0.7),
        knowledge_base=knowledge or [],
        welcome_message=data.get("welcome_message") or None,
    )


class FirestoreService:
    """Service for managing assistants in Firestore."""

    _initialized: bool = False
    _db: AsyncClient | None = None

    def __init__(self) -> None:
        """Initialize Firestore client (singleton pattern)."""
        if FirestoreService._initialized:
            self.db = FirestoreService._db
            return

        settings = get_settings()

        try:
            creds_dict = _load_firebase_credentials(settings.firebase_credentials)

            if not firebase_admin._apps:
                cred = credentials.Certificate(creds_dict)
                firebase_admin.initialize_app(cred)

            gcp_credentials = service_account.Credentials.from_service_account_info(
                creds_dict
            )

            FirestoreService._db = AsyncClient(
                project=creds_dict.get("project_id"),
                credentials=gcp_credentials,
            )
            self.db = FirestoreService._db

            FirestoreService._initialized = True
            logger.info("Firestore client initialized successfully")
        except Exception as e:
            logger.error("Failed to initialize Firestore: %s", e)
            raise

    async def _get_owned_snapshot(self, assistant_id: str, owner_id: str):
        doc = await self.db.collection(ASSISTANTS).document(assistant_id).get()
        if not doc.exists or doc.to_dict().get("owner_id") != owner_id:
            raise AssistantNotFoundError(f"Assistant {assistant_id} not found")
        return doc

    # --- Assistant Methods ---

    async def list_assistants(
        self, owner_id: str, limit: int = 100
    ) -> list[dict[str, Any]]:
        """List assistant summaries for a user, newest first."""
        try:
            query = (
                self.db.collection(ASSISTANTS)
                .where("owner_id", "==", owner_id)
                .order_by("created_at", direction=firestore.Query.DESCENDING)
                .limit(limit)
            )

            docs = await query.get()
            assistants = []

            for doc in docs:
                data = doc.to_dict()
                summary = {
                    "id": doc.id,
                    "name": data.get("name", ""),
                    "provider": data.get("provider", ""),
                    "model_version": data.get("model_version", ""),
                    "knowledge_count": data.get("knowledge_count", 0),
                    "created_at": data.get("created_at"),
                    "updated_at": data.get("updated_at"),
                }
                for key in ("created_at", "updated_at"):
                    if summary[key]:
                        summary[key] = summary[key].isoformat()
                assistants.append(summary)

            return assistants

        except Exception as e:
            logger.error("Failed to list assistants: %s", e)
            raise

    async def get_assistant(self, assistant_id: str, owner_id: str) -> AssistantConfig:
        """Load an assistant with its knowledge base."""
        try:
            doc = await self._get_owned_snapshot(assistant_id, owner_id)
            knowledge = await self.get_knowledge(assistant_id)
            return document_to_assistant(doc.id, doc.to_dict(), knowledge)

        except AssistantNotFoundError:
            raise
        except Exception as e:
            logger.error("Failed to get assistant %s: %s", assistant_id, e)
            raise

    async def create_assistant(
        self, config: AssistantConfig, owner_id: str
    ) -> AssistantConfig:
        """Persist a new assistant, then its knowledge base."""
        try:
            doc_ref = self.db.collection(ASSISTANTS).document()
            now = datetime.now(UTC)
            data = assistant_to_document(config, owner_id)
            data.update({"created_at": now, "updated_at": now, "knowledge_count": 0})

            await doc_ref.set(data)
            await self.replace_knowledge(doc_ref.id, config.knowledge_base)

            logger.info("Created assistant %s for %s", doc_ref.id, owner_id)
            return config.model_copy(update={"id": doc_ref.id})

        except Exception as e:
            logger.error("Failed to create assistant: %s", e)
            raise

    async def update_assistant(
        self, assistant_id: str, config: AssistantConfig, owner_id: str
    ) -> AssistantConfig:
        """Update an assistant, then replace its knowledge base."""
        try:
            await self._get_owned_snapshot(assistant_id, owner_id)

            doc_ref = self.db.collection(ASSISTANTS).document(assistant_id)
            data = assistant_to_document(config, owner_id)
            data["updated_at"] = datetime.now(UTC)

            await doc_ref.set(data, merge=True)
            await self.replace_knowledge(assistant_id, config.knowledge_base)

            logger.info("Updated assistant %s", assistant_id)
            return config.model_copy(update={"id": assistant_id})

        except AssistantNotFoundError:
            raise
        except Exception as e:
            logger.error("Failed to update assistant %s: %s", assistant_id, e)
            raise

    async def delete_assistant(self, assistant_id: str, owner_id: str) -> None:
        """Delete an assistant and its knowledge base."""
        try:
            await self._get_owned_snapshot(assistant_id, owner_id)
            await self._clear_knowledge(assistant_id)
            await self.db.collection(ASSISTANTS).document(assistant_id).delete()

            logger.info("Deleted assistant %s", assistant_id)

        except AssistantNotFoundError:
            raise
        except Exception as e:
            logger.error("Failed to delete assistant %s: %s", assistant_id, e)
            raise

    # --- Knowledge Methods ---

    async def get_knowledge(self, assistant_id: str) -> list[KnowledgeItem]:
        """Load knowledge items in upload order."""
        knowledge_ref = (
            self.db.collection(ASSISTANTS)
            .document(assistant_id)
            .collection(KNOWLEDGE)
            .order_by("position")
        )
        docs = await knowledge_ref.get()

        items = []
        for doc in docs:
            data = doc.to_dict()
            if data.get("name") and data.get("content"):
                items.append(KnowledgeItem(name=data["name"], content=data["content"]))
        return items

    async def replace_knowledge(
        self, assistant_id: str, items: list[KnowledgeItem]
    ) -> int:
        """Replace an assistant's knowledge base (delete all, then insert)."""
        try:
            await self._clear_knowledge(assistant_id)

            assistant_ref = self.db.collection(ASSISTANTS).document(assistant_id)
            knowledge_ref = assistant_ref.collection(KNOWLEDGE)

            usable = [item for item in items if item.is_usable]
            batch = self.db.batch()
            for position, item in enumerate(usable):
                batch.set(
                    knowledge_ref.document(),
                    {"name": item.name, "content": item.content, "position": position},
                )
                if (position + 1) % BATCH_LIMIT == 0:
                    await batch.commit()
                    batch = self.db.batch()

            if len(usable) % BATCH_LIMIT != 0:
                await batch.commit()

            await assistant_ref.set({"knowledge_count": len(usable)}, merge=True)

            logger.info(
                "Stored %d knowledge item(s) for assistant %s", len(usable), assistant_id
            )
            return len(usable)

        except Exception as e:
            logger.error("Failed to replace knowledge: %s", e)
            raise

    async def _clear_knowledge(self, assistant_id: str) -> int:
        knowledge_ref = (
            self.db.collection(ASSISTANTS).document(assistant_id).collection(KNOWLEDGE)
        )
        docs = await knowledge_ref.get()
        deleted_count = 0

        batch = self.db.batch()
        for doc in docs:
            batch.delete(doc.reference)
            deleted_count += 1

            if deleted_count % BATCH_LIMIT == 0:
                await batch.commit()
                batch = self.db.batch()

        if deleted_count % BATCH_LIMIT != 0:
            await batch.commit()

        return deleted_count

    async def health_check(self) -> dict[str, Any]:
        """Check Firestore connection health."""
        import time

        start = time.time()
        try:
            test_ref = self.db.collection("_health_check").document("test")
            await test_ref.set({"timestamp": datetime.now(UTC)})
            await test_ref.get()

            latency = (time.time() - start) * 1000
            return {"status": "healthy", "latency_ms": round(latency, 2)}
        except Exception as e:
            return {"status": "unhealthy", "error": str(e)}


def get_firestore_service() -> FirestoreService:
    """Get Firestore service singleton."""
    return FirestoreService()
