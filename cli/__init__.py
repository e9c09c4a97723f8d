"""Terminal front end for Qitrack."""
