"""boardsync - Create tracker issues from a kanban export and link them to a project board."""
