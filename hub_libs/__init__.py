# =============================================================================
# Data Hub Job Archive Libraries
# =============================================================================
# This package contains the shared libraries for managing pipeline job and
# trace documents. See individual modules for detailed documentation.
# =============================================================================

"""
Data Hub job archive libraries.

Sub-packages and modules:
- models: Pydantic data models, responses and settings
- document_store: Store contract shared by the job and trace stores
- archive: Archive container naming and writing
- job_manager: Delete / export / import of jobs and their traces
"""

__version__ = "0.1.0"
