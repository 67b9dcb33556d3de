from .report import bias_table, bias_by_overlap
