"""
Main entry point for the registrar.
"""

import json
import threading
import time
from typing import Any, Dict, Optional

from .core.exceptions import ConfigurationError, RegistrarException
from .persistence import StoreFactory, StudentManagementSystem
from .services import RecordsService, StatusService
from .api.rest_api import RegistrarRestAPI


DEFAULT_CONFIG: Dict[str, Any] = {
    "data_file": "registrar_data.txt",
    "store_type": "text",
    "strict_references": False,
    "host": "0.0.0.0",
    "rest_port": 8000,
    "autosave": True,
    "cors_origins": ["*"],
}


def load_config(path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Merge defaults, an optional JSON file and explicit overrides."""
    config = dict(DEFAULT_CONFIG)
    if path:
        try:
            with open(path, "r", encoding="utf-8") as f:
                file_config = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Failed to read configuration {path}: {str(e)}")
        if not isinstance(file_config, dict):
            raise ConfigurationError(f"Configuration {path} must contain a JSON object")
        unknown = set(file_config) - set(DEFAULT_CONFIG)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        config.update(file_config)
    if overrides:
        config.update({key: value for key, value in overrides.items() if value is not None})
    return config


class RegistrarPlatform:
    """Wires the repository, its data store, services and the REST API."""
    
    def __init__(self, config: Optional[dict] = None):
        self._config = load_config(overrides=config)
        self._system = StudentManagementSystem()
        self._store = None
        self._status_service = None
        self._records_service = None
        self._rest_api = None
        self._rest_thread = None
        self._running = False
        
        # Initialize platform
        self._initialize_platform()
    
    @property
    def config(self) -> Dict[str, Any]:
        return dict(self._config)
    
    @property
    def system(self) -> StudentManagementSystem:
        return self._system
    
    @property
    def records(self) -> RecordsService:
        return self._records_service
    
    @property
    def statuses(self) -> StatusService:
        return self._status_service
    
    @property
    def rest_api(self) -> RegistrarRestAPI:
        return self._rest_api
    
    def _initialize_platform(self):
        """Initialize the platform with all services."""
        print("Initializing registrar...")
        
        self._store = StoreFactory.create_store(
            self._config["store_type"],
            path=self._config["data_file"],
            strict_references=self._config["strict_references"],
        )
        print(f"✓ Data store initialized: {self._store.describe()}")
        
        self._status_service = StatusService(self._system)
        self._records_service = RecordsService(self._system, self._status_service)
        print("✓ Services initialized")
        
        self._rest_api = RegistrarRestAPI(
            self._system,
            self._store,
            cors_origins=self._config["cors_origins"],
        )
        print("✓ API initialized")
    
    def load_data(self) -> bool:
        """Load the data file if there is one. Returns whether anything was loaded."""
        if not self._store.exists():
            print(f"No data file yet at {self._store.describe()}, starting empty")
            return False
        with self._rest_api.lock:
            loaded, report = self._store.load()
            self._system.replace_with(loaded)
        print(f"✓ Records loaded: {report}")
        for record in report.skipped:
            print(f"  Warning: skipped {record.section.value} record on line "
                  f"{record.line_number}: {record.reason}")
        return True
    
    def save_data(self) -> None:
        with self._rest_api.lock:
            self._store.save(self._system)
        print(f"✓ Records saved to {self._store.describe()}")
    
    def start_rest_server(self, host: Optional[str] = None, port: Optional[int] = None):
        """Start the REST server."""
        if self._rest_thread is not None:
            print("REST server already running")
            return
        
        import uvicorn
        
        host = host or self._config["host"]
        port = port or self._config["rest_port"]
        
        def run_server():
            uvicorn.run(
                self._rest_api.app,
                host=host,
                port=port,
                log_level="info"
            )
        
        # Start server in a separate thread
        self._rest_thread = threading.Thread(target=run_server, daemon=True)
        self._rest_thread.start()
        
        print(f"✓ REST server started on {host}:{port}")
    
    def start_platform(self):
        """Load data and start serving."""
        if self._running:
            print("Registrar already running")
            return
        
        print("Starting registrar...")
        self.load_data()
        self.start_rest_server()
        
        self._running = True
        port = self._config["rest_port"]
        print("✓ Registrar started successfully!")
        print(f"  - REST API: http://localhost:{port}")
        print(f"  - API Docs: http://localhost:{port}/docs")
    
    def stop_platform(self):
        """Stop the platform, saving first when autosave is on."""
        if not self._running:
            print("Registrar not running")
            return
        
        print("Stopping registrar...")
        if self._config["autosave"]:
            self.save_data()
        
        self._running = False
        print("✓ Registrar stopped")
    
    def print_dashboard(self, pattern: Optional[str] = None):
        """Print the dashboard table to stdout."""
        rows = self._status_service.filter_rows(self._status_service.dashboard(), pattern)
        header = ("Student", "Module", "Grade", "Status", "Enrolled")
        table = [header] + [tuple(row.cells()) for row in rows]
        widths = [max(len(line[i]) for line in table) for i in range(len(header))]
        for line in table:
            print("  ".join(cell.ljust(width) for cell, width in zip(line, widths)).rstrip())
        print(f"\n{len(rows)} rows")
    
    def run_demo(self):
        """Walk through enrollment, grading and the resulting statuses."""
        print("Running registrar demonstration...")
        
        records = self._records_service
        student = records.add_student("Alice", "S1", "a@x.com")
        module = records.add_module("Maths", "M1", "Dr. X", "SEM1")
        records.enroll(student.id, module.id)
        print(f"Enrolled {student.name} in {module.name}: "
              f"{self._status_service.status_for(student, module).value}")
        
        for value in (55.0, 30.0):
            records.record_grade(student.id, module.id, value)
            enrolled_status = self._status_service.status_for(student, module)
            records.unenroll(student.id, module.id)
            finished_status = self._status_service.status_for(student, module)
            records.enroll(student.id, module.id)
            print(f"Grade {value}: enrolled -> {enrolled_status.value}, "
                  f"unenrolled -> {finished_status.value}")
        
        print("\n=== Dashboard ===")
        self.print_dashboard()
        print("\n✓ Demo completed")


def main():
    """Main entry point."""
    import argparse
    
    parser = argparse.ArgumentParser(description="Student, module and grade records")
    parser.add_argument("--config", type=str, help="Configuration file path (JSON)")
    parser.add_argument("--data-file", type=str, help="Text data file to load and save")
    parser.add_argument("--host", type=str, help="REST server host")
    parser.add_argument("--rest-port", type=int, help="REST server port")
    parser.add_argument("--strict-references", action="store_true", default=None,
                        help="Fail loading when a grade or enrollment names an unknown ID")
    parser.add_argument("--no-autosave", dest="autosave", action="store_false", default=None,
                        help="Do not save the data file on shutdown")
    parser.add_argument("--demo", action="store_true", help="Run demo mode")
    parser.add_argument("--dashboard", action="store_true", help="Print the dashboard and exit")
    parser.add_argument("--filter", type=str, help="Regular expression filter for --dashboard")
    
    args = parser.parse_args()
    
    try:
        config = load_config(args.config, {
            "data_file": args.data_file,
            "host": args.host,
            "rest_port": args.rest_port,
            "strict_references": args.strict_references,
            "autosave": args.autosave,
        })
        platform = RegistrarPlatform(config)
        
        if args.demo:
            platform.run_demo()
            return
        if args.dashboard:
            platform.load_data()
            platform.print_dashboard(args.filter)
            return
        
        platform.start_platform()
    except RegistrarException as e:
        print(f"Error: {e.message}")
        raise SystemExit(1)
    
    try:
        # Keep running
        print("\nRegistrar is running. Press Ctrl+C to stop.")
        while True:
            time.sleep(1)
    
    except KeyboardInterrupt:
        print("\nShutting down...")
        try:
            platform.stop_platform()
        except RegistrarException as e:
            print(f"Error: {e.message}")
            raise SystemExit(1)


if __name__ == "__main__":
    main()
