"""Tasks domain - task records, status transitions, dependencies and list views"""
