from fastapi import APIRouter

# Auth
from gymbook.api.v1.public.auth import router as auth_router

# Public: profile
from gymbook.api.v1.public.me import router as me_router

# Public: discovery & availability
from gymbook.api.v1.public.gyms import router as gyms_router

# Public: customer bookings, extensions, ratings
from gymbook.api.v1.public.bookings import router as bookings_router

# Owner
from gymbook.api.v1.owner.gym import router as owner_gym_router
from gymbook.api.v1.owner.bookings import router as owner_bookings_router
from gymbook.api.v1.owner.extensions import router as owner_extensions_router

# Admin
from gymbook.api.v1.admin.gyms import router as admin_gyms_router

api_router = APIRouter()

# --- Auth ---
api_router.include_router(auth_router)

# --- Public ---
api_router.include_router(me_router)
api_router.include_router(gyms_router)
api_router.include_router(bookings_router)

# --- Owner ---
api_router.include_router(owner_gym_router)
api_router.include_router(owner_bookings_router)
api_router.include_router(owner_extensions_router)

# --- Admin ---
api_router.include_router(admin_gyms_router)
