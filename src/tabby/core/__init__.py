# ABOUTME: Core orchestration: the scan workflow, selection handoff, and library list.
# ABOUTME: Wires the catalog stages together and turns failures into user alerts.
