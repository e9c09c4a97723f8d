"""FastAPI front end for Qitrack."""
