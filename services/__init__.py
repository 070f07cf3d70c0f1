"""
Service layer

Pure calculation, no status transitions:
- SnapshotService: copy / restore / diff game snapshots
- VersionNumberService: next semantic version number
- MediaService / LicenseService: submission precondition checks
- ReviewTimeService: estimated review time
- TimelineService: submission tracker entries
"""
