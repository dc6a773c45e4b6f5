"""Shared FastAPI dependencies."""

from __future__ import annotations

from functools import lru_cache

from spa_chat.booking.relay import BookingRelay
from spa_chat.chat.conversations import ConversationStore
from spa_chat.chat.service import ChatService
from spa_chat.core.config import Settings, get_settings
from spa_chat.db.catalog import CatalogRepository
from spa_chat.db.conversations import ConversationRepository
from spa_chat.db.knowledge import KnowledgeRepository
from spa_chat.db.sqlite import SQLiteDatabase
from spa_chat.matching.intents import DEFAULT_INTENT_RULES, IntentRule, load_intent_rules
from spa_chat.rag.business import BusinessConfigLoader
from spa_chat.rag.embeddings import EmbeddingClient, build_embedding_client
from spa_chat.rag.llm import CompletionClient, build_completion_client
from spa_chat.rag.retriever import VectorRetriever
from spa_chat.rag.strategy import RetrievalStrategy

_DB: SQLiteDatabase | None = None
_EMBEDDER: EmbeddingClient | None = None
_COMPLETION_CLIENT: CompletionClient | None = None
_BUSINESS_LOADER: BusinessConfigLoader | None = None
_CHAT_SERVICE: ChatService | None = None
_BOOKING_RELAY: BookingRelay | None = None
_INTENT_RULES: tuple[IntentRule, ...] | None = None


@lru_cache(maxsize=1)
def get_app_settings() -> Settings:
    return get_settings()


def get_database() -> SQLiteDatabase:
    global _DB
    if _DB is None:
        settings = get_app_settings()
        db = SQLiteDatabase(settings.db_path)
        db.ensure_schema()
        _DB = db
    return _DB


def get_embedding_client() -> EmbeddingClient:
    global _EMBEDDER
    if _EMBEDDER is None:
        _EMBEDDER = build_embedding_client(get_app_settings())
    return _EMBEDDER


def get_completion_client() -> CompletionClient:
    global _COMPLETION_CLIENT
    if _COMPLETION_CLIENT is None:
        _COMPLETION_CLIENT = build_completion_client(get_app_settings())
    return _COMPLETION_CLIENT


def get_knowledge_repository() -> KnowledgeRepository:
    return KnowledgeRepository(get_database())


def get_catalog() -> CatalogRepository:
    return CatalogRepository(get_database())


def get_conversation_store() -> ConversationStore:
    return ConversationStore(ConversationRepository(get_database()))


def get_retrieval_strategy() -> RetrievalStrategy:
    retriever = VectorRetriever(get_knowledge_repository(), get_embedding_client())
    return RetrievalStrategy.from_settings(retriever, get_app_settings())


def get_business_loader() -> BusinessConfigLoader:
    global _BUSINESS_LOADER
    if _BUSINESS_LOADER is None:
        _BUSINESS_LOADER = BusinessConfigLoader(get_catalog())
    return _BUSINESS_LOADER


def get_chat_service() -> ChatService:
    global _CHAT_SERVICE
    if _CHAT_SERVICE is None:
        _CHAT_SERVICE = ChatService(
            settings=get_app_settings(),
            strategy=get_retrieval_strategy(),
            business=get_business_loader(),
            conversations=get_conversation_store(),
            completion=get_completion_client(),
        )
    return _CHAT_SERVICE


def get_booking_relay() -> BookingRelay:
    global _BOOKING_RELAY
    if _BOOKING_RELAY is None:
        settings = get_app_settings()
        _BOOKING_RELAY = BookingRelay(settings.booking_relay_url, timeout=settings.request_timeout)
    return _BOOKING_RELAY


def get_intent_rules() -> tuple[IntentRule, ...]:
    global _INTENT_RULES
    if _INTENT_RULES is None:
        path = get_app_settings().intent_table_path
        _INTENT_RULES = load_intent_rules(path) if path is not None else DEFAULT_INTENT_RULES
    return _INTENT_RULES


__all__ = [
    "get_app_settings",
    "get_database",
    "get_embedding_client",
    "get_completion_client",
    "get_knowledge_repository",
    "get_catalog",
    "get_conversation_store",
    "get_retrieval_strategy",
    "get_business_loader",
    "get_chat_service",
    "get_booking_relay",
    "get_intent_rules",
]
