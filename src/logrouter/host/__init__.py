"""Host process: service container, greeter, worker and host loop."""
