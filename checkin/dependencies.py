"""
Service Container
=================
Every stateful manager is built once, here, and handed to the routers
through FastAPI's dependency system. Nothing holds module-level
singletons; tests build their own ``AppServices`` with fakes and pass it
to ``create_app``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from fastapi import Request

from checkin.config import Settings
from checkin.db.local_store import LocalStore
from checkin.services.activity_tracker import ActivityTracker, RemoteActivitySink
from checkin.services.api_client import CheckInAPIClient
from checkin.services.cache import CacheManager
from checkin.services.celebrity import CelebrityService
from checkin.services.contact_analysis import ContactAnalysisService
from checkin.services.following_sync import FollowingSyncService
from checkin.services.pinned_contacts import PinnedContactsStore
from checkin.services.user_emotion import UserEmotionService


@dataclass
class AppServices:
    settings: Settings
    api: CheckInAPIClient
    store: LocalStore
    contacts: ContactAnalysisService
    pinned: PinnedContactsStore
    following: FollowingSyncService
    activity: ActivityTracker
    user_emotion: UserEmotionService
    celebrities: CelebrityService

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        api: CheckInAPIClient | None = None,
        store: LocalStore | None = None,
    ) -> AppServices:
        api = api or CheckInAPIClient.from_settings(settings)
        store = store or LocalStore.from_settings(settings)

        contacts = ContactAnalysisService(api)
        pinned = PinnedContactsStore(store, capacity=settings.max_pinned_contacts)
        following = FollowingSyncService(
            api,
            pinned,
            store,
            contact_analysis=contacts,
            cooldown=timedelta(hours=settings.following_sync_cooldown_hours),
        )
        activity = ActivityTracker(
            RemoteActivitySink(api),
            batch_size=settings.activity_batch_size,
            flush_interval=settings.activity_flush_interval_seconds,
            guest_email=settings.guest_email,
        )
        cache = CacheManager(store)
        user_emotion = UserEmotionService(
            api,
            cache,
            ttl=timedelta(minutes=settings.user_analysis_cache_ttl_minutes),
        )
        return cls(
            settings=settings,
            api=api,
            store=store,
            contacts=contacts,
            pinned=pinned,
            following=following,
            activity=activity,
            user_emotion=user_emotion,
            celebrities=CelebrityService(api, cache),
        )


def get_services(request: Request) -> AppServices:
    return request.app.state.services
