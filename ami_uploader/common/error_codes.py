"""
This module defines the process exit codes used by ami-uploader.
"""

# General
ERR_GENERAL_OPERATION_FAILED = 1
ERR_AWS_REGION_INVALID = 3
ERR_FILE_READ_FAILED = 4
ERR_CONFIG_INVALID = 5

# AWS collaborators
ERR_AWS_CLIENT_INIT_FAILED = 10
ERR_AWS_CREDENTIALS_NOT_FOUND = 11
ERR_AWS_S3_UPLOAD_FAILED = 12
ERR_AWS_IMPORT_TASK_FAILED = 13
ERR_AWS_TASK_FAILED = 14
ERR_AWS_TASK_TIMEOUT = 15
ERR_AWS_TASK_STATUS_CHECK_FAILED = 16
ERR_AWS_TASK_RESULT_FAILED = 17
ERR_AWS_AMI_REGISTER_FAILED = 18
ERR_AWS_AMI_DEREGISTER_FAILED = 19
ERR_AWS_AMI_FETCH_FAILED = 20
ERR_AWS_AMI_NOT_FOUND = 21

# SIGINT convention
ERR_OPERATION_CANCELLED = 130
