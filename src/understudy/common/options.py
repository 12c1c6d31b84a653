# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

import os


log_dir = os.getenv("UNDERSTUDY_LOG_DIR")
"""If not None, understudy logs its activity to a file named understudy-<pid>.log
in the specified directory, where <pid> is the return value of os.getpid().
"""

receive_timeout = float(os.getenv("UNDERSTUDY_RECEIVE_TIMEOUT", "0.1"))
"""How long, in seconds, assert_received() waits for a matching call record to
be posted before failing.
"""

actor_idle_timeout = float(os.getenv("UNDERSTUDY_ACTOR_IDLE_TIMEOUT", "5.0"))
"""How long, in seconds, the worker thread of a double's actor stays alive while
its mailbox is empty. The worker is restarted on demand.
"""
