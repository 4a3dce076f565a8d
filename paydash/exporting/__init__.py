from .xlsx import build_schedule_frames, export_schedule_workbook, write_schedule_files

__all__ = ["build_schedule_frames", "export_schedule_workbook", "write_schedule_files"]
