from .employee import Employee, EmployeeRole, TimeOffRequest, TimeOffStatus
from .shift import IndividualShift, ShiftOption, StaffingRequirement
from .system import Holiday, StaffingAlert

__all__ = [
    "Employee",
    "EmployeeRole",
    "TimeOffRequest",
    "TimeOffStatus",
    "IndividualShift",
    "ShiftOption",
    "StaffingRequirement",
    "Holiday",
    "StaffingAlert",
]
