from .models import FundamentalMatrix, Model
