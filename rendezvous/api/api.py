from fastapi import APIRouter
from rendezvous.api.v1 import establishments, doctors, patients, appointments

api_router = APIRouter()

api_router.include_router(establishments.router, prefix="/establishments", tags=["establishments"])
api_router.include_router(doctors.router, prefix="/doctors", tags=["doctors"])
api_router.include_router(patients.router, prefix="/patients", tags=["patients"])
api_router.include_router(appointments.router, prefix="/appointments", tags=["appointments"])
