from fastapi import APIRouter, Depends, status

from clinic.middlewares.roles import ADMIN_ONLY, FRONT_DESK, CurrentUser, require_roles
from clinic.routers.errors import http_error, not_found
from clinic.schemas.billing import (
    PackageCreate,
    PackageResponse,
    PackageUpdate,
    PurchaseCreate,
    PurchaseResponse,
    PurchaseUpdate,
)
from clinic.services.billing import package_records, purchase_records, purchase_service
from clinic.services.patients import patient_records

router = APIRouter(tags=["billing"])

front_desk = Depends(require_roles(*FRONT_DESK))


@router.get("/packages", response_model=list[PackageResponse])
def list_packages() -> list[PackageResponse]:
    return [PackageResponse.model_validate(p) for p in package_records.list()]


@router.get("/packages/active", response_model=list[PackageResponse])
def list_active_packages() -> list[PackageResponse]:
    return [
        PackageResponse.model_validate(p) for p in package_records.list(is_active=True)
    ]


@router.get("/packages/{package_id}", response_model=PackageResponse)
def get_package(package_id: int) -> PackageResponse:
    package = package_records.get(package_id)
    if package is None:
        raise not_found("Package")
    return PackageResponse.model_validate(package)


@router.post(
    "/packages", response_model=PackageResponse, status_code=status.HTTP_201_CREATED
)
def create_package(
    payload: PackageCreate, _: CurrentUser = Depends(require_roles(*ADMIN_ONLY))
) -> PackageResponse:
    return PackageResponse.model_validate(package_records.create(**payload.model_dump()))


@router.patch("/packages/{package_id}", response_model=PackageResponse)
def update_package(
    package_id: int,
    payload: PackageUpdate,
    _: CurrentUser = Depends(require_roles(*ADMIN_ONLY)),
) -> PackageResponse:
    values = {
        field: value
        for field, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or field == "description"
    }
    package = package_records.update(package_id, **values)
    if package is None:
        raise not_found("Package")
    return PackageResponse.model_validate(package)


@router.delete("/packages/{package_id}")
def delete_package(
    package_id: int, _: CurrentUser = Depends(require_roles(*ADMIN_ONLY))
) -> dict:
    if purchase_records.find_one(package_id=package_id) is not None:
        raise http_error(ValueError("Satın alımı olan paket silinemez"))
    if not package_records.delete(package_id):
        raise not_found("Package")
    return {"message": "Paket silindi"}


@router.get("/purchases", response_model=list[PurchaseResponse])
def list_purchases(_: CurrentUser = front_desk) -> list[PurchaseResponse]:
    return [PurchaseResponse.model_validate(p) for p in purchase_records.list()]


@router.get("/purchases/patient/{patient_id}", response_model=list[PurchaseResponse])
def list_patient_purchases(
    patient_id: int, _: CurrentUser = front_desk
) -> list[PurchaseResponse]:
    if not patient_records.exists(patient_id):
        raise not_found("Patient")
    return [
        PurchaseResponse.model_validate(p)
        for p in purchase_records.list(patient_id=patient_id)
    ]


@router.get("/purchases/{purchase_id}", response_model=PurchaseResponse)
def get_purchase(purchase_id: int, _: CurrentUser = front_desk) -> PurchaseResponse:
    purchase = purchase_records.get(purchase_id)
    if purchase is None:
        raise not_found("Purchase")
    return PurchaseResponse.model_validate(purchase)


@router.post(
    "/purchases", response_model=PurchaseResponse, status_code=status.HTTP_201_CREATED
)
def create_purchase(
    payload: PurchaseCreate, current: CurrentUser = front_desk
) -> PurchaseResponse:
    try:
        purchase = purchase_service.create(payload, created_by=current.id)
    except ValueError as exc:
        raise http_error(exc) from exc
    return PurchaseResponse.model_validate(purchase)


@router.patch("/purchases/{purchase_id}", response_model=PurchaseResponse)
def update_purchase(
    purchase_id: int, payload: PurchaseUpdate, _: CurrentUser = front_desk
) -> PurchaseResponse:
    try:
        purchase = purchase_service.update(purchase_id, payload)
    except ValueError as exc:
        raise http_error(exc) from exc
    return PurchaseResponse.model_validate(purchase)


@router.delete("/purchases/{purchase_id}")
def delete_purchase(purchase_id: int, _: CurrentUser = front_desk) -> dict:
    if not purchase_records.delete(purchase_id):
        raise not_found("Purchase")
    return {"message": "Satın alım silindi"}
