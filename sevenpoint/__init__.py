from .sevenpoint_api import findFundamentalMat
