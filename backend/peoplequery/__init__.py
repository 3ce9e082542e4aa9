"""Natural-language questions over employee records and HR documents."""
