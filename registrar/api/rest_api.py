"""
REST API for the registrar using FastAPI.
"""

import threading
from typing import Optional, Dict, List
from datetime import datetime, timezone
from pydantic import BaseModel, Field

from fastapi import FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..core.entities import Student, Module, Grade
from ..core.exceptions import (
    RegistrarException, ValidationError, ResourceNotFoundError,
    DuplicateEntityError, MalformedRecordError
)
from ..core.interfaces import DataStore
from ..persistence import StudentManagementSystem, LoadReport
from ..services import RecordsService, StatusService


# Pydantic models for API
class StudentCreate(BaseModel):
    id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=1, max_length=200)


class StudentUpdate(BaseModel):
    id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=1, max_length=200)


class StudentResponse(BaseModel):
    id: str
    name: str
    email: str
    enrolled_modules: List[str] = []


class StudentSummaryResponse(BaseModel):
    id: str
    name: str
    email: str
    passed_modules: int


class ModuleCreate(BaseModel):
    id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=200)
    teacher: str = Field(..., min_length=1, max_length=200)
    semester: str = Field(..., min_length=1, max_length=50)


class ModuleUpdate(BaseModel):
    id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=200)
    teacher: Optional[str] = Field(None, min_length=1, max_length=200)
    semester: Optional[str] = Field(None, min_length=1, max_length=50)


class ModuleResponse(BaseModel):
    id: str
    name: str
    teacher: str
    semester: str
    semesters: List[str] = []
    enrolled_students: List[str] = []


class EnrollmentRequest(BaseModel):
    student_id: str = Field(..., min_length=1)
    module_id: str = Field(..., min_length=1)


class EnrollmentResponse(BaseModel):
    success: bool
    message: str
    student_id: str
    module_id: str
    status: Optional[str] = None


class EnrollmentSyncRequest(BaseModel):
    choices: Dict[str, bool]


class EnrollmentSyncResponse(BaseModel):
    enrolled: List[str] = []
    unenrolled: List[str] = []
    locked: List[str] = []


class GradeCreate(BaseModel):
    student_id: str = Field(..., min_length=1)
    module_id: str = Field(..., min_length=1)
    value: float


class GradeUpdate(BaseModel):
    value: float


class GradeResponse(BaseModel):
    student_id: str
    module_id: str
    value: float
    status: Optional[str] = None


class PairStatusResponse(BaseModel):
    student_id: str
    module_id: str
    enrolled: bool
    grade: Optional[float] = None
    status: Optional[str] = None


class DashboardRowResponse(BaseModel):
    student_id: str
    student_name: str
    module_id: str
    module_name: str
    grade: Optional[float] = None
    status: str
    enrolled: bool


class BoardEntryResponse(BaseModel):
    module_id: str
    module_name: str
    enrolled: bool
    locked: bool


class BoardResponse(BaseModel):
    student_id: str
    year: int
    semesters: Dict[str, List[BoardEntryResponse]]


class SkippedRecordResponse(BaseModel):
    line_number: int
    section: str
    reason: str


class PersistenceResponse(BaseModel):
    success: bool
    message: str
    location: str
    students: int
    modules: int
    grades: int
    enrollments: int
    skipped: List[SkippedRecordResponse] = []


class StatisticsResponse(BaseModel):
    success: bool
    message: str
    statistics: Dict[str, Dict[str, int]]


class RegistrarRestAPI:
    """REST API exposing the repository, status queries and save/load."""
    
    def __init__(self, system: StudentManagementSystem, store: DataStore,
                 cors_origins: Optional[List[str]] = None):
        self._system = system
        self._store = store
        self._status_service = StatusService(system)
        self._records_service = RecordsService(system, self._status_service)
        
        self._lock = threading.RLock()
        
        # Create FastAPI app
        self.app = FastAPI(
            title="Registrar API",
            description="Students, modules, enrollments and grades",
            version=__version__,
            docs_url="/docs",
            redoc_url="/redoc"
        )
        
        # Add CORS middleware
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins or ["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        
        # Setup routes
        self._setup_routes()
    
    @property
    def lock(self) -> threading.RLock:
        return self._lock
    
    def _setup_routes(self):
        """Setup API routes."""
        
        @self.app.get("/", response_model=Dict[str, str])
        async def root():
            """Root endpoint."""
            return {
                "message": "Registrar API",
                "version": __version__,
                "docs": "/docs"
            }
        
        @self.app.get("/health", response_model=Dict[str, str])
        async def health_check():
            """Health check endpoint."""
            return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}
        
        # Student endpoints
        @self.app.post("/students", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
        async def create_student(student_data: StudentCreate):
            """Create a new student."""
            try:
                with self._lock:
                    student = self._records_service.add_student(
                        student_data.name, student_data.id, student_data.email
                    )
                    return self._student_to_response(student)
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        @self.app.get("/students", response_model=List[StudentResponse])
        async def list_students(pattern: Optional[str] = Query(None, alias="filter"),
                                skip: int = 0, limit: int = 100):
            """List students ordered by ID, optionally filtered."""
            try:
                with self._lock:
                    students = sorted(self._system.students, key=lambda s: s.id)
                    students = self._status_service.filter_records(students, pattern)
                    students = students[skip:skip + limit]
                    return [self._student_to_response(student) for student in students]
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        @self.app.get("/students/{student_id}", response_model=StudentResponse)
        async def get_student(student_id: str):
            """Get a student by ID."""
            try:
                with self._lock:
                    return self._student_to_response(self._records_service.get_student(student_id))
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        @self.app.put("/students/{student_id}", response_model=StudentResponse)
        async def update_student(student_id: str, student_data: StudentUpdate):
            """Update a student's name, ID and email."""
            try:
                with self._lock:
                    student = self._records_service.update_student(
                        student_id, student_data.name, student_data.id, student_data.email
                    )
                    return self._student_to_response(student)
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        @self.app.delete("/students/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
        async def delete_student(student_id: str):
            """Remove a student with their grades and enrollments."""
            try:
                with self._lock:
                    self._records_service.remove_student(student_id)
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        @self.app.get("/students/{student_id}/summary", response_model=StudentSummaryResponse)
        async def get_student_summary(student_id: str):
            """Name, email and number of passed modules."""
            try:
                with self._lock:
                    summary = self._status_service.student_summary(
                        self._records_service.get_student(student_id)
                    )
                    return StudentSummaryResponse(
                        id=summary.student_id,
                        name=summary.name,
                        email=summary.email,
                        passed_modules=summary.passed_modules,
                    )
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        @self.app.get("/students/{student_id}/enrollments", response_model=List[str])
        async def get_student_enrollments(student_id: str):
            """Get the IDs of the modules a student is enrolled in."""
            try:
                with self._lock:
                    return sorted(self._records_service.get_student(student_id).enrolled_modules)
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        @self.app.put("/students/{student_id}/enrollments", response_model=EnrollmentSyncResponse)
        async def sync_student_enrollments(student_id: str, sync_data: EnrollmentSyncRequest):
            """Apply enrolled/not enrolled choices for several modules."""
            try:
                with self._lock:
                    result = self._records_service.sync_enrollments(student_id, sync_data.choices)
                    return EnrollmentSyncResponse(
                        enrolled=result.enrolled,
                        unenrolled=result.unenrolled,
                        locked=result.locked,
                    )
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        @self.app.get("/students/{student_id}/board/{year}", response_model=BoardResponse)
        async def get_semester_board(student_id: str, year: int):
            """Modules of a study year with the student's enrollment."""
            try:
                with self._lock:
                    student = self._records_service.get_student(student_id)
                    board = self._status_service.semester_board(student, year)
                    return BoardResponse(
                        student_id=student.id,
                        year=year,
                        semesters={
                            identifier: [
                                BoardEntryResponse(
                                    module_id=entry.module_id,
                                    module_name=entry.module_name,
                                    enrolled=entry.enrolled,
                                    locked=entry.locked,
                                )
                                for entry in entries
                            ]
                            for identifier, entries in board.items()
                        },
                    )
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        # Module endpoints
        @self.app.post("/modules", response_model=ModuleResponse, status_code=status.HTTP_201_CREATED)
        async def create_module(module_data: ModuleCreate):
            """Create a new module."""
            try:
                with self._lock:
                    module = self._records_service.add_module(
                        module_data.name, module_data.id, module_data.teacher, module_data.semester
                    )
                    return self._module_to_response(module)
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        @self.app.get("/modules", response_model=List[ModuleResponse])
        async def list_modules(semester: Optional[str] = None,
                               pattern: Optional[str] = Query(None, alias="filter"),
                               skip: int = 0, limit: int = 100):
            """List modules ordered by ID, optionally by semester or filter pattern."""
            try:
                with self._lock:
                    if semester:
                        modules = self._status_service.modules_for_semester(semester)
                    else:
                        modules = sorted(self._system.modules, key=lambda m: m.id)
                    modules = self._status_service.filter_records(modules, pattern)
                    modules = modules[skip:skip + limit]
                    return [self._module_to_response(module) for module in modules]
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        @self.app.get("/modules/{module_id}", response_model=ModuleResponse)
        async def get_module(module_id: str):
            """Get a module by ID."""
            try:
                with self._lock:
                    return self._module_to_response(self._records_service.get_module(module_id))
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        @self.app.put("/modules/{module_id}", response_model=ModuleResponse)
        async def update_module(module_id: str, module_data: ModuleUpdate):
            """Update a module."""
            try:
                with self._lock:
                    module = self._records_service.update_module(
                        module_id, module_data.name, module_data.id,
                        teacher=module_data.teacher, semester=module_data.semester
                    )
                    return self._module_to_response(module)
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        @self.app.delete("/modules/{module_id}", status_code=status.HTTP_204_NO_CONTENT)
        async def delete_module(module_id: str):
            """Remove a module with its grades and enrollments."""
            try:
                with self._lock:
                    self._records_service.remove_module(module_id)
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        # Enrollment endpoints
        @self.app.post("/enrollments", response_model=EnrollmentResponse)
        async def enroll_student(enrollment_data: EnrollmentRequest):
            """Enroll a student in a module."""
            try:
                with self._lock:
                    module = self._records_service.enroll(
                        enrollment_data.student_id, enrollment_data.module_id
                    )
                    return self._enrollment_response(
                        enrollment_data.student_id, module,
                        f"Student enrolled in module {module.name}"
                    )
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        @self.app.delete("/enrollments/{student_id}/{module_id}", response_model=EnrollmentResponse)
        async def unenroll_student(student_id: str, module_id: str):
            """Unenroll a student from a module. Grades are kept."""
            try:
                with self._lock:
                    module = self._records_service.unenroll(student_id, module_id)
                    return self._enrollment_response(
                        student_id, module, f"Student unenrolled from module {module.name}"
                    )
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        # Grade endpoints
        @self.app.post("/grades", response_model=GradeResponse, status_code=status.HTTP_201_CREATED)
        async def create_grade(grade_data: GradeCreate):
            """Record a grade, replacing any earlier grade for the pair."""
            try:
                with self._lock:
                    grade = self._records_service.record_grade(
                        grade_data.student_id, grade_data.module_id, grade_data.value
                    )
                    return self._grade_to_response(grade)
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        @self.app.get("/grades", response_model=List[GradeResponse])
        async def list_grades(pattern: Optional[str] = Query(None, alias="filter")):
            """List grades ordered by student and module ID, optionally filtered."""
            try:
                with self._lock:
                    grades = sorted(self._system.grades, key=lambda g: g.key)
                    grades = self._status_service.filter_records(grades, pattern)
                    return [self._grade_to_response(grade) for grade in grades]
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        @self.app.put("/grades/{student_id}/{module_id}", response_model=GradeResponse)
        async def update_grade(student_id: str, module_id: str, grade_data: GradeUpdate):
            """Change an existing grade."""
            try:
                with self._lock:
                    grade = self._records_service.update_grade(student_id, module_id, grade_data.value)
                    return self._grade_to_response(grade)
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        @self.app.delete("/grades/{student_id}/{module_id}", status_code=status.HTTP_204_NO_CONTENT)
        async def delete_grade(student_id: str, module_id: str):
            """Remove a grade."""
            try:
                with self._lock:
                    self._records_service.remove_grade(student_id, module_id)
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        # Status endpoints
        @self.app.get("/status/{student_id}/{module_id}", response_model=PairStatusResponse)
        async def get_pair_status(student_id: str, module_id: str):
            """Derived status of one student/module pair."""
            try:
                with self._lock:
                    student, module = self._records_service.get_pair(student_id, module_id)
                    grade = self._system.find_grade(student, module)
                    module_status = self._status_service.status_for(student, module)
                    return PairStatusResponse(
                        student_id=student.id,
                        module_id=module.id,
                        enrolled=self._system.is_enrolled(student, module),
                        grade=None if grade is None else grade.value,
                        status=None if module_status is None else module_status.value,
                    )
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        @self.app.get("/dashboard", response_model=List[DashboardRowResponse])
        async def get_dashboard(pattern: Optional[str] = Query(None, alias="filter")):
            """Status of every enrolled or graded pair, optionally filtered."""
            try:
                with self._lock:
                    rows = self._status_service.filter_rows(self._status_service.dashboard(), pattern)
                    return [
                        DashboardRowResponse(
                            student_id=row.student_id,
                            student_name=row.student_name,
                            module_id=row.module_id,
                            module_name=row.module_name,
                            grade=row.grade,
                            status=row.status.value,
                            enrolled=row.enrolled,
                        )
                        for row in rows
                    ]
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        # Statistics endpoints
        @self.app.get("/statistics", response_model=StatisticsResponse)
        async def get_statistics():
            """Get record counts and dashboard status counts."""
            with self._lock:
                statistics = {
                    "records": {
                        "students": len(self._system.students),
                        "modules": len(self._system.modules),
                        "grades": len(self._system.grades),
                        "enrollments": sum(1 for _ in self._system.enrollments()),
                    },
                    "statuses": self._status_service.status_counts(),
                }
                return StatisticsResponse(
                    success=True,
                    message="Statistics retrieved successfully",
                    statistics=statistics
                )
        
        # Persistence endpoints
        @self.app.post("/data/save", response_model=PersistenceResponse)
        async def save_data():
            """Write the full state to the data store."""
            try:
                with self._lock:
                    self._store.save(self._system)
                    return self._persistence_response("Data saved successfully.")
            except RegistrarException as e:
                raise self._to_http_error(e)
        
        @self.app.post("/data/load", response_model=PersistenceResponse)
        async def load_data():
            """Replace the in-memory state with the data store contents."""
            try:
                with self._lock:
                    loaded, report = self._store.load()
                    self._system.replace_with(loaded)
                    return self._persistence_response("Data loaded successfully.", report)
            except RegistrarException as e:
                raise self._to_http_error(e)
    
    @staticmethod
    def _to_http_error(error: RegistrarException) -> HTTPException:
        """Map a registrar error onto an HTTP error."""
        if isinstance(error, ValidationError):
            return HTTPException(status_code=400, detail=error.message)
        if isinstance(error, ResourceNotFoundError):
            return HTTPException(status_code=404, detail=error.message)
        if isinstance(error, DuplicateEntityError):
            return HTTPException(status_code=409, detail=error.message)
        if isinstance(error, MalformedRecordError):
            return HTTPException(status_code=422, detail=error.message)
        return HTTPException(status_code=500, detail=f"Internal error: {error.message}")
    
    def _student_to_response(self, student: Student) -> StudentResponse:
        """Convert Student entity to response model."""
        return StudentResponse(
            id=student.id,
            name=student.name,
            email=student.email,
            enrolled_modules=sorted(student.enrolled_modules),
        )
    
    def _module_to_response(self, module: Module) -> ModuleResponse:
        """Convert Module entity to response model."""
        return ModuleResponse(
            id=module.id,
            name=module.name,
            teacher=module.teacher,
            semester=module.semester,
            semesters=module.semesters,
            enrolled_students=sorted(module.enrolled_students),
        )
    
    def _grade_to_response(self, grade: Grade) -> GradeResponse:
        """Convert Grade entity to response model."""
        module_status = self._status_service.status_for(grade.student, grade.module)
        return GradeResponse(
            student_id=grade.student.id,
            module_id=grade.module.id,
            value=grade.value,
            status=None if module_status is None else module_status.value,
        )
    
    def _enrollment_response(self, student_id: str, module: Module, message: str) -> EnrollmentResponse:
        student = self._system.get_student_by_id(student_id)
        module_status = self._status_service.status_for(student, module)
        return EnrollmentResponse(
            success=True,
            message=message,
            student_id=student_id,
            module_id=module.id,
            status=None if module_status is None else module_status.value,
        )
    
    def _persistence_response(self, message: str,
                              report: Optional[LoadReport] = None) -> PersistenceResponse:
        skipped = report.skipped if report is not None else []
        return PersistenceResponse(
            success=True,
            message=message,
            location=self._store.describe(),
            students=len(self._system.students),
            modules=len(self._system.modules),
            grades=len(self._system.grades),
            enrollments=sum(1 for _ in self._system.enrollments()),
            skipped=[
                SkippedRecordResponse(
                    line_number=record.line_number,
                    section=record.section.value,
                    reason=record.reason,
                )
                for record in skipped
            ],
        )
