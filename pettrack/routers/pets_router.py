from fastapi import APIRouter, Depends, Response

from ..application.ports.user_repo import CurrentUser, UserRole
from ..application.services.pet_service import PetService
from ..schemas.pets.pet import PetCreate, PetEnvelope, PetListEnvelope, PetResponse, PetUpdate
from ..utils import parse_id
from .deps import get_pet_service, require_roles

router = APIRouter(prefix="/pets", tags=["Pets"])

require_pet_owner = require_roles(UserRole.PET_OWNER)


@router.post("", response_model=PetEnvelope, status_code=201)
def create_pet(body: PetCreate, user: CurrentUser = Depends(require_pet_owner), svc: PetService = Depends(get_pet_service)):
    pet = svc.create(user.id, body.name, body.type.value, body.breed, body.age, body.weight)
    return PetEnvelope(data=PetResponse.from_dto(pet))


@router.get("", response_model=PetListEnvelope)
def list_pets(user: CurrentUser = Depends(require_pet_owner), svc: PetService = Depends(get_pet_service)):
    return PetListEnvelope(data=[PetResponse.from_dto(p) for p in svc.list_for_owner(user.id)])


@router.get("/{pet_id}", response_model=PetEnvelope)
def get_pet(pet_id: str, user: CurrentUser = Depends(require_pet_owner), svc: PetService = Depends(get_pet_service)):
    return PetEnvelope(data=PetResponse.from_dto(svc.get(user.id, parse_id(pet_id, "petId"))))


@router.patch("/{pet_id}", response_model=PetEnvelope)
def update_pet(pet_id: str, body: PetUpdate, user: CurrentUser = Depends(require_pet_owner), svc: PetService = Depends(get_pet_service)):
    fields = body.model_dump(exclude_unset=True, exclude_none=True)
    if "type" in fields:
        fields["type"] = body.type.value
    pet = svc.update(user.id, parse_id(pet_id, "petId"), fields)
    return PetEnvelope(data=PetResponse.from_dto(pet))


@router.delete("/{pet_id}", status_code=204)
def delete_pet(pet_id: str, user: CurrentUser = Depends(require_pet_owner), svc: PetService = Depends(get_pet_service)):
    svc.delete(user.id, parse_id(pet_id, "petId"))
    return Response(status_code=204)
