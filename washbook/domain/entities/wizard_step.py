from __future__ import annotations

from enum import IntEnum


class WizardStep(IntEnum):
    DATETIME = 1
    VEHICLE = 2
    SERVICES = 3
    LOCATION = 4
    PAYMENT = 5

    @property
    def route(self) -> str:
        return _ROUTES[self]

    @property
    def next(self) -> "WizardStep | None":
        if self is WizardStep.PAYMENT:
            return None
        return WizardStep(self + 1)

    @property
    def previous(self) -> "WizardStep":
        if self is WizardStep.DATETIME:
            return self
        return WizardStep(self - 1)


_ROUTES = {
    WizardStep.DATETIME: "BookingDateTime",
    WizardStep.VEHICLE: "BookingVehicle",
    WizardStep.SERVICES: "BookingServices",
    WizardStep.LOCATION: "BookingLocation",
    WizardStep.PAYMENT: "BookingPayment",
}

TOTAL_STEPS = len(WizardStep)
CONFIRMATION_ROUTE = "BookingConfirmation"
