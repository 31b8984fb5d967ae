import logging

import customtkinter as ctk
from tkinter import messagebox

from envelope_crypto import encrypt_message, decrypt_message

DISPLAY_WIDTH = 40  # characters per line in the result box
ENCRYPT = "Encrypt"
DECRYPT = "Decrypt"


def format_for_display(text: str, width: int = DISPLAY_WIDTH) -> str:
    """Break text into lines of at most ``width`` characters (display only)."""
    if width <= 0:
        raise ValueError("width must be positive")
    return "\n".join(text[i:i + width] for i in range(0, len(text), width))


# -------------------- UI --------------------
class MessageEncryptionApp(ctk.CTk):
    def __init__(self):
        super().__init__()
        self.title("Secure Message Encryption — AES-CBC")
        self.geometry("780x640")
        ctk.set_appearance_mode("dark")  # default appearance
        ctk.set_default_color_theme("blue")

        self.mode = ENCRYPT
        self.result = ""

        self._build_ui()
        self._refresh_action()

    # ---------- UI layout ----------
    def _build_ui(self):
        # Top bar
        top = ctk.CTkFrame(self, corner_radius=16)
        top.pack(fill="x", padx=16, pady=(16, 8))

        title = ctk.CTkLabel(top, text="Secure Message Encryption", font=("Segoe UI", 22, "bold"))
        title.pack(side="left", padx=12, pady=12)

        self.mode_switch = ctk.CTkSwitch(top, text="Light Mode", command=self._toggle_mode)
        self.mode_switch.pack(side="right", padx=12)

        # Tabs
        self.tabs = ctk.CTkSegmentedButton(self, values=[ENCRYPT, DECRYPT], command=self._switch_tab)
        self.tabs.set(ENCRYPT)
        self.tabs.pack(fill="x", padx=16, pady=8)

        # Message area
        msg_frame = ctk.CTkFrame(self, corner_radius=16)
        msg_frame.pack(fill="x", padx=16, pady=8)

        self.msg_label = ctk.CTkLabel(msg_frame, text="Message to Encrypt")
        self.msg_label.pack(anchor="w", padx=12, pady=(8, 0))

        self.msg_box = ctk.CTkTextbox(msg_frame, height=100)
        self.msg_box.pack(fill="x", padx=12, pady=(4, 12))
        self.msg_box.bind("<KeyRelease>", lambda _e: self._refresh_action())

        # Password area
        pw_frame = ctk.CTkFrame(self, corner_radius=16)
        pw_frame.pack(fill="x", padx=16, pady=8)

        self.pw_entry = ctk.CTkEntry(pw_frame, placeholder_text="Secret key…", show="*", width=520)
        self.pw_entry.pack(side="left", padx=(12, 8), pady=12)
        self.pw_entry.bind("<KeyRelease>", lambda _e: self._refresh_action())

        self.show_pw = ctk.CTkCheckBox(pw_frame, text="Show", command=self._toggle_pw)
        self.show_pw.pack(side="left", padx=(0, 12))

        # Buttons
        actions = ctk.CTkFrame(self, corner_radius=16)
        actions.pack(fill="x", padx=16, pady=8)

        self.action_btn = ctk.CTkButton(actions, text="Encrypt Message", command=self._run_action, width=160)
        self.action_btn.pack(side="left", padx=12, pady=12)

        clear_btn = ctk.CTkButton(actions, text="Clear All", command=self._clear_all, width=120)
        clear_btn.pack(side="left", padx=12, pady=12)

        self.copy_btn = ctk.CTkButton(actions, text="Copy Result", command=self._copy_result, width=120,
                                      state="disabled")
        self.copy_btn.pack(side="right", padx=12, pady=12)

        # Result & status
        out_wrap = ctk.CTkFrame(self, corner_radius=16)
        out_wrap.pack(fill="both", expand=True, padx=16, pady=8)

        self.result_label = ctk.CTkLabel(out_wrap, text="Encrypted Result:")
        self.result_label.pack(anchor="w", padx=12, pady=(8, 0))

        self.result_box = ctk.CTkTextbox(out_wrap, height=120, font=("Consolas", 13))
        self.result_box.pack(fill="both", expand=True, padx=12, pady=(4, 8))
        self.result_box.configure(state="disabled")

        self.status = ctk.CTkTextbox(out_wrap, height=60)
        self.status.pack(fill="x", padx=12, pady=(0, 12))
        self.status.insert("end", "Ready. Type a message, set a secret key, then Encrypt/Decrypt.\n")
        self.status.configure(state="disabled")

    # ---------- Helpers ----------
    def _log(self, msg: str):
        self.status.configure(state="normal")
        self.status.insert("end", msg + "\n")
        self.status.see("end")
        self.status.configure(state="disabled")

    def _toggle_mode(self):
        if self.mode_switch.get():
            ctk.set_appearance_mode("light")
            self.mode_switch.configure(text="Dark Mode")
        else:
            ctk.set_appearance_mode("dark")
            self.mode_switch.configure(text="Light Mode")

    def _toggle_pw(self):
        self.pw_entry.configure(show="" if self.show_pw.get() else "*")

    def _message(self) -> str:
        return self.msg_box.get("1.0", "end-1c")

    def _refresh_action(self):
        ready = bool(self._message()) and bool(self.pw_entry.get())
        self.action_btn.configure(state="normal" if ready else "disabled")

    def _show_result(self, text: str):
        self.result = text
        self.result_box.configure(state="normal")
        self.result_box.delete("1.0", "end")
        self.result_box.insert("end", format_for_display(text))
        self.result_box.configure(state="disabled")
        self.copy_btn.configure(state="normal" if text else "disabled")

    def _switch_tab(self, mode: str):
        self.mode = mode
        self.msg_label.configure(text=f"Message to {mode}")
        self.action_btn.configure(text=f"{mode} Message")
        self.result_label.configure(text=f"{mode}ed Result:")
        self._show_result("")
        self._refresh_action()

    def _clear_all(self):
        self.msg_box.delete("1.0", "end")
        self.pw_entry.delete(0, "end")
        self._show_result("")
        self._refresh_action()

    def _copy_result(self):
        # Copy the envelope as produced, without display line breaks
        self.clipboard_clear()
        self.clipboard_append(self.result)
        self._log("Result copied to clipboard.")

    # ---------- Encrypt/Decrypt flows ----------
    def _run_action(self):
        message = self._message()
        password = self.pw_entry.get()
        if not message or not password:
            messagebox.showwarning("Missing input", "Please enter a message and a secret key.")
            return

        if self.mode == ENCRYPT:
            try:
                self._show_result(encrypt_message(message, password))
            except Exception as e:
                logging.getLogger(__name__).exception("Encryption failed")
                self._log(f"Error: {e}")
                messagebox.showerror("Error", str(e))
                return
            self._log("Encryption complete.")
        else:
            result = decrypt_message(message, password)
            if not result.ok:
                self._show_result("")
                self._log(str(result.error))
                messagebox.showerror("Cannot decrypt", str(result.error))
                return
            self._show_result(result.plaintext)
            self._log("Decryption complete.")

        self.msg_box.delete("1.0", "end")
        self._refresh_action()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app = MessageEncryptionApp()
    app.mainloop()
