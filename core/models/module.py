# =============================================================================
# core/models/module.py - Module Catalogue
# =============================================================================
# Fixed enumeration of the logical databases and the standard tables each one
# carries in every academic session.
#
# Each module maps to one container per session. "Master" tables hold
# identity registries and are copied forward on rollover; every other
# standard table is a log that starts empty each year.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field


class Module(str, Enum):
    """
    Logical database identities.

    The value is the module key used in directory pointers; the
    container_name is the name the container carries in storage.
    """
    STUDENTS = "STUDENTS"
    EMPLOYEES = "EMPLOYEES"
    STUDENT_ATTENDANCE = "STUDENT_ATTENDANCE"
    EMPLOYEE_ATTENDANCE = "EMPLOYEE_ATTENDANCE"
    FEES = "FEES"
    EXPENSES = "EXPENSES"
    HOMEWORK = "HOMEWORK"
    RESULTS = "RESULTS"
    EVENTS = "EVENTS"
    USERS = "USERS"
    DELETED_DATA = "DELETED_DATA"

    @property
    def container_name(self) -> str:
        return CONTAINER_NAMES[self]


CONTAINER_NAMES: dict[Module, str] = {
    Module.STUDENTS: "WH_Students_DB",
    Module.EMPLOYEES: "WH_Employees_DB",
    Module.STUDENT_ATTENDANCE: "WH_Student_Attendance_DB",
    Module.EMPLOYEE_ATTENDANCE: "WH_Employee_Attendance_DB",
    Module.FEES: "WH_Fees_DB",
    Module.EXPENSES: "WH_Expenses_DB",
    Module.HOMEWORK: "WH_Homework_DB",
    Module.RESULTS: "WH_Results_DB",
    Module.EVENTS: "WH_Events_DB",
    Module.USERS: "WH_Users_DB",
    Module.DELETED_DATA: "WH_Archive_DB",
}


class TableSpec(BaseModel):
    """
    A standard table provisioned in every session.

    Example:
        TableSpec(module=Module.FEES, name="Collection_Log",
                  header=["Timestamp", "AdmissionNo", ...])
    """

    module: Module = Field(..., description="Module whose container holds the table")
    name: str = Field(..., min_length=1, description="Table name inside the container")
    header: list[str] = Field(default_factory=list, description="Column names (row 1)")
    master: bool = Field(
        default=False,
        description="True if the table survives an academic-year rollover"
    )

    model_config = {"frozen": True}


ARCHIVE_TABLE = "Deleted_Log"
ARCHIVE_HEADER = ["DeletedAt", "DeletedBy", "Module", "OriginalID", "Data_JSON"]

SETTINGS_TABLE = "Settings"
ACTIVE_SESSION_PROPERTY = "ACTIVE_SESSION_YEAR"

STANDARD_TABLES: list[TableSpec] = [
    TableSpec(
        module=Module.USERS,
        name="Master",
        header=[
            "username", "password", "role", "name", "employeeId",
            "assignedClass", "assignedSection", "photoUrl",
        ],
        master=True,
    ),
    TableSpec(module=Module.USERS, name=SETTINGS_TABLE, header=["Property", "Value"]),
    TableSpec(
        module=Module.STUDENTS,
        name="Master",
        header=[
            "Admission No", "Roll No", "Name", "Class", "Section", "Status",
            "Father Name", "Mother Name", "DOB", "Phone 1", "Phone 2", "Address",
            "Aadhaar", "Samagra ID", "Joining Date", "Total Fees", "Photo URL",
        ],
        master=True,
    ),
    TableSpec(
        module=Module.EMPLOYEES,
        name="Master",
        header=[
            "Employee ID", "Name", "Post", "Phone 1", "Email", "Joining Date",
            "Salary", "Father Name", "Mother Name", "DOB", "Gender",
            "Qualification", "Experience", "Address", "Phone 2", "Aadhaar",
            "PAN", "Bank Account", "IFSC", "Photo URL",
        ],
        master=True,
    ),
    TableSpec(
        module=Module.EMPLOYEES,
        name="Time_Table",
        header=["ID", "TeacherID", "TeacherName", "Day", "Slot", "Subject", "Class"],
    ),
    TableSpec(
        module=Module.STUDENT_ATTENDANCE,
        name="Global_Locks",
        header=["Class", "Section", "Date", "By"],
    ),
    TableSpec(
        module=Module.EMPLOYEE_ATTENDANCE,
        name="Daily_Log",
        header=["Date", "EmployeeID", "Status", "Timestamp"],
    ),
    TableSpec(
        module=Module.EVENTS,
        name="Master",
        header=["ID", "Title", "Date", "Type", "Audience"],
    ),
    TableSpec(
        module=Module.FEES,
        name="Collection_Log",
        header=["Timestamp", "AdmissionNo", "Amount", "Mode", "Remarks", "ReceiptNo"],
    ),
    TableSpec(
        module=Module.EXPENSES,
        name="Main_Ledger",
        header=[
            "Date", "ReceiptNo", "Category", "Purpose", "Amount", "Mode",
            "Ref", "Remarks", "ApprovedBy",
        ],
    ),
    TableSpec(
        module=Module.RESULTS,
        name="Registry",
        header=["ExamID", "ExamName", "Admin", "CreatedAt", "Subjects_JSON"],
    ),
    TableSpec(module=Module.DELETED_DATA, name=ARCHIVE_TABLE, header=ARCHIVE_HEADER),
]


# Identity registries copied forward on rollover
MASTER_TABLES: list[TableSpec] = [entry for entry in STANDARD_TABLES if entry.master]


def tables_for(module: Module) -> list[TableSpec]:
    """Standard tables belonging to one module (empty for HOMEWORK)."""
    return [entry for entry in STANDARD_TABLES if entry.module == module]
