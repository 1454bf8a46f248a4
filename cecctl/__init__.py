"""HDMI-CEC control through the cec-client adapter."""
