from fastapi import APIRouter
from app.api.routes import auth, doctors, slots, appointments

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Auth"])
api_router.include_router(doctors.router, prefix="/doctors", tags=["Doctors"])
api_router.include_router(slots.router, prefix="/slots", tags=["Slots"])
api_router.include_router(appointments.router, prefix="/appointments", tags=["Appointments"])
