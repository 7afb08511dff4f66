#!/usr/bin/env python3
"""
Demo scenario for the registrar.
"""

import sys
import os
import json
import tempfile

# Add the project root to the Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from registrar.main import RegistrarPlatform
from registrar.core.exceptions import RegistrarException
from registrar.persistence import load


def run_demo():
    """Run a walkthrough of the registrar."""
    print("=" * 60)
    print("REGISTRAR - DEMO")
    print("=" * 60)
    
    data_dir = tempfile.mkdtemp(prefix="registrar-demo-")
    config = {
        'data_file': os.path.join(data_dir, 'demo_records.txt'),
        'autosave': False,
    }
    
    platform = RegistrarPlatform(config)
    
    try:
        print("\n1. Creating sample data...")
        create_sample_data(platform)
        
        print("\n2. Demonstrating derived statuses...")
        demonstrate_statuses(platform)
        
        print("\n3. Demonstrating the semester board...")
        demonstrate_semester_board(platform)
        
        print("\n4. Demonstrating removal...")
        demonstrate_removal(platform)
        
        print("\n5. Demonstrating save and load...")
        demonstrate_persistence(platform)
        
        print("\n6. Statistics...")
        show_statistics(platform)
        
        print("\n" + "=" * 60)
        print("DEMO COMPLETED SUCCESSFULLY!")
        print("=" * 60)
        
    except RegistrarException as e:
        print(f"\nDemo failed with error: {e.message}")
        raise


def create_sample_data(platform):
    """Create students, modules, enrollments and grades."""
    records = platform.records
    
    print("  Creating students...")
    for name, student_id, email in [
        ("Alice", "S1", "a@x.com"),
        ("Bob", "S2", "bob@x.com"),
        ("Carol", "S3", "carol@x.com"),
    ]:
        records.add_student(name, student_id, email)
    
    print("  Creating modules...")
    for name, module_id, teacher, semester in [
        ("Maths", "M1", "Dr. X", "SEM1"),
        ("Programming", "M2", "Dr. Y", "SEM1&SEM2"),
        ("Databases", "M3", "Dr. Z", "SEM2"),
        ("Networks", "M4", "Dr. X", "SEM3"),
    ]:
        records.add_module(name, module_id, teacher, semester)
    
    print("  Enrolling students and recording grades...")
    records.enroll("S1", "M1")
    records.enroll("S1", "M2")
    records.enroll("S2", "M3")
    records.record_grade("S1", "M2", 71.5)
    records.record_grade("S2", "M1", 64.0)
    records.record_grade("S3", "M1", 35.0)
    
    print("  ✓ Sample data created successfully")


def demonstrate_statuses(platform):
    """Walk Alice through the end-to-end example."""
    records = platform.records
    statuses = platform.statuses
    alice = records.get_student("S1")
    maths = records.get_module("M1")
    
    print(f"  Enrolled, no grade:        {statuses.status_for(alice, maths).value}")
    records.record_grade("S1", "M1", 55.0)
    print(f"  Enrolled, grade 55.0:      {statuses.status_for(alice, maths).value}")
    records.update_grade("S1", "M1", 30.0)
    print(f"  Enrolled, grade 30.0:      {statuses.status_for(alice, maths).value}")
    records.unenroll("S1", "M1")
    print(f"  Not enrolled, grade 30.0:  {statuses.status_for(alice, maths).value}")
    records.update_grade("S1", "M1", 55.0)
    print(f"  Not enrolled, grade 55.0:  {statuses.status_for(alice, maths).value}")
    
    print("\n  Dashboard rows matching 'alice':")
    for row in statuses.filter_rows(statuses.dashboard(), "alice"):
        print(f"    {row.module_name:12} {row.status.value}")


def demonstrate_semester_board(platform):
    """Show year one for Alice and change her choices."""
    alice = platform.records.get_student("S1")
    board = platform.statuses.semester_board(alice, 1)
    for semester, entries in board.items():
        print(f"  {semester}:")
        for entry in entries:
            flags = "enrolled" if entry.enrolled else "-"
            if entry.locked:
                flags += " (passed)"
            print(f"    {entry.module_id:4} {entry.module_name:12} {flags}")
    
    result = platform.records.sync_enrollments("S1", {"M1": True, "M2": False, "M3": True})
    print(f"  Synced: enrolled={result.enrolled} unenrolled={result.unenrolled} locked={result.locked}")


def demonstrate_removal(platform):
    """Removing a module drops its grades and enrollments."""
    records = platform.records
    records.remove_module("M3")
    bob = records.get_student("S2")
    print(f"  Bob's enrollments after removing M3: {sorted(bob.enrolled_modules)}")
    print(f"  Grades left: {len(platform.system.grades)}")


def demonstrate_persistence(platform):
    """Save to the data file and read it back."""
    platform.save_data()
    reloaded = load(platform.config['data_file'])
    print(f"  Reloaded {len(reloaded.students)} students, {len(reloaded.modules)} modules, "
          f"{len(reloaded.grades)} grades")
    with open(platform.config['data_file'], "r", encoding="utf-8") as f:
        print("  File contents:")
        for line in f:
            print(f"    {line.rstrip()}")


def show_statistics(platform):
    """Print status counts."""
    print(json.dumps(platform.statuses.status_counts(), indent=2))


if __name__ == "__main__":
    run_demo()
