from .core import MREstimate, wald_ratio, ivw, mr, f_statistic
from .two_stage import twosls, one_sample_mr
